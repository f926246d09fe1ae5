from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .stack import Action

# Probed in order; the first callable attribute wins.
_CLEANUP_HOOKS = ("addCleanup", "addfinalizer", "cleanup")


@dataclass(frozen=True)
class HostBinding:
    """What the engine needs from a host test object.

    `fail` reports a test failure. `register_cleanup`, when present, is the
    host's own cleanup registration of shape ``register(action)``; its
    presence selects hosted mode.
    """
    fail: Callable[[str], Any]
    register_cleanup: Optional[Callable[[Action], Any]] = None
    host: Any = None

    @property
    def hosted(self) -> bool: return self.register_cleanup is not None


def _raise_assertion(msg: str) -> None:
    raise AssertionError(msg)


def bind(host: Any) -> HostBinding:
    """Probe `host` once for a failure sink and a cleanup hook.

    Recognises ``unittest.TestCase`` (``fail``/``addCleanup``), pytest's
    ``FixtureRequest`` (``addfinalizer``) and any object exposing
    ``cleanup``. ``None`` binds to an explicit-only host.
    """
    if host is None: return HostBinding(fail=_raise_assertion)
    if isinstance(host, HostBinding): return host
    fail = getattr(host, "fail", None)
    if not callable(fail): fail = _raise_assertion
    hook = None
    for attr in _CLEANUP_HOOKS:
        cand = getattr(host, attr, None)
        if callable(cand):
            hook = cand; break
    return HostBinding(fail=fail, register_cleanup=hook, host=host)
