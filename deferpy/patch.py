from __future__ import annotations
import inspect
import logging
import os
import shutil
import tempfile
from collections.abc import MutableMapping
from typing import TYPE_CHECKING, Any, Optional

from .config import get_settings
from .errors import PatchTypeError
from .stack import Action

if TYPE_CHECKING:
    from .scope import Scope

logger = logging.getLogger(__name__)

_MISSING = object()


def _check_assignable(old: Any, new: Any) -> None:
    if new is None or old is None or old is _MISSING: return
    if not isinstance(new, type(old)): raise PatchTypeError(type(new), type(old))


def _register(scope: "Scope", restore: Action) -> None:
    # A refused registration must not leave the mutation behind.
    try: scope.add_cleanup(restore)
    except BaseException:
        restore()
        raise


def _own_attr(target: Any, name: str) -> Any:
    try: own = vars(target)
    except TypeError: return getattr(target, name)
    if name in own: return own[name]
    # Data descriptors on the type (properties, slots) are written through.
    if hasattr(inspect.getattr_static(type(target), name, None), "__set__"): return getattr(target, name)
    return _MISSING


def patch(scope: "Scope", target: Any, name: Any, value: Any) -> Any:
    """Replace ``target.name`` (or ``target[name]`` for mappings) with `value`.

    The previous object is restored when the scope ends; an absent mapping
    key is deleted again. For attributes the raw object stored on `target`
    itself is put back (a staticmethod stays a staticmethod), and an
    attribute that was only inherited is deleted again. `value` must be
    None or an instance of the type of the current value, otherwise
    PatchTypeError is raised at once and nothing is changed.

    Returns:
        The previous value (None when the mapping key was absent).
    """
    if isinstance(target, MutableMapping):
        old = target.get(name, _MISSING)
        _check_assignable(old, value)
        target[name] = value
        if old is _MISSING:
            def restore() -> None: target.pop(name, None)
        else:
            def restore() -> None: target[name] = old
    else:
        old = getattr(target, name)
        _check_assignable(old, value)
        raw = _own_attr(target, name)
        setattr(target, name, value)
        if raw is _MISSING:
            def restore() -> None: delattr(target, name)
        else:
            def restore() -> None: setattr(target, name, raw)
    _register(scope, restore)
    return None if old is _MISSING else old


def _restore_env(name: str, old: Optional[str]) -> None:
    if old is None: os.environ.pop(name, None)
    else: os.environ[name] = old


def setenv(scope: "Scope", name: str, value: str) -> None:
    old = os.environ.get(name)
    os.environ[name] = value
    _register(scope, lambda: _restore_env(name, old))


def unsetenv(scope: "Scope", name: str) -> None:
    old = os.environ.pop(name, None)
    _register(scope, lambda: _restore_env(name, old))


def mkdir(scope: "Scope", prefix: Optional[str] = None, dir: Optional[str] = None) -> str:
    """Create a fresh temporary directory removed when the scope ends.

    Creation errors propagate immediately. Removal is best-effort: a
    failure is logged and does not stop the rest of the unwind.
    """
    settings = get_settings()
    path = tempfile.mkdtemp(prefix=settings.temp_prefix if prefix is None else prefix,
                            dir=settings.temp_root if dir is None else dir)
    def remove() -> None:
        try: shutil.rmtree(path)
        except OSError as ex: logger.warning("could not remove temporary directory %s: %s", path, ex)
    _register(scope, remove)
    logger.debug("created temporary directory %s", path)
    return path
