"""
Scopes: deferred restore actions, nested sub-scopes and patching.

Run: python examples/nested_scopes.py
"""
import logging
import os

from deferpy import Scope


class Settings:
    debug = False


def main() -> None:
    logging.basicConfig(level=logging.DEBUG, format="%(name)s %(levelname)s: %(message)s")
    with Scope(name="outer") as c:
        c.defer(lambda: print("[outer] first deferred, runs last"))
        c.patch(Settings, "debug", True)
        c.setenv("EXAMPLE_MODE", "outer")

        def inner(c: Scope) -> None:
            c.setenv("EXAMPLE_MODE", "inner")
            work = c.mkdir()
            print(f"[inner] EXAMPLE_MODE={os.environ['EXAMPLE_MODE']} dir={work}")
            c.defer(lambda: print("[inner] restored before run() returns"))

        c.run("inner", inner)
        print(f"[outer] EXAMPLE_MODE={os.environ['EXAMPLE_MODE']} debug={Settings.debug}")
    print(f"[after] EXAMPLE_MODE={os.environ.get('EXAMPLE_MODE')} debug={Settings.debug}")


if __name__ == "__main__":
    main()
