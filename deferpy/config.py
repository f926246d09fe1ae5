from __future__ import annotations
import functools
import os
from dataclasses import dataclass
from typing import Mapping, Optional

ENV_TMP_PREFIX = "DEFERPY_TMP_PREFIX"
ENV_TMPDIR = "DEFERPY_TMPDIR"


@dataclass(frozen=True)
class Settings:
    """Library-wide defaults for the patch primitives.

    Args:
        temp_prefix: Name prefix of directories created by `Scope.mkdir`.
        temp_root: Parent directory for them; None uses the system default.
    """
    temp_prefix: str = "deferpy-"
    temp_root: Optional[str] = None


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if environ is None else environ
    prefix = env.get(ENV_TMP_PREFIX) or Settings.temp_prefix
    root = env.get(ENV_TMPDIR) or None
    return Settings(temp_prefix=prefix, temp_root=root)


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Read once per process.
    return load_settings()
