from __future__ import annotations
import asyncio
import contextlib
import inspect
import logging
import weakref
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

import anyio

from . import patch as _patch
from .errors import UsageError
from .host import HostBinding, bind
from .stack import Action, ActionStack

logger = logging.getLogger(__name__)

A = TypeVar("A")

EXPLICIT = "explicit"
HOSTED = "hosted"

Adapter = Callable[["Scope", Action], None]


def _default_adapter(scope: "Scope", action: Action) -> None: scope.defer(action)


async def _await(aw: Awaitable[A]) -> A: return await aw


def _drive(aw: Awaitable[A]) -> A:
    try: asyncio.get_running_loop()
    except RuntimeError: return anyio.run(_await, aw)
    if inspect.iscoroutine(aw): aw.close()
    raise UsageError("cannot drive an async body from inside a running event loop; call run from synchronous code")


def _report_abandoned(stack: ActionStack, name: str) -> None:
    if not stack.pending: return
    logger.error("Done not called after Defer on scope %r; running %d pending restore action(s)", name, len(stack))
    stack.unwind()


class Scope:
    """Per-test scope of restore actions, finished explicitly or by the host.

    A Scope owns one ActionStack. Restore actions registered with `defer`
    (directly, or via `add_cleanup` and the patch primitives) run in LIFO
    order when the scope finishes.

    The delegation mode is chosen once, at construction:

    - ``hosted``: the host exposes a cleanup hook (``addCleanup`` on a
      ``unittest.TestCase``, ``addfinalizer`` on a pytest request, or
      ``cleanup``). The scope registers its own unwind with that hook, so
      `done` is optional.
    - ``explicit``: there is no hook, and `done` must be called.

    Passing another Scope as host creates a nested scope that inherits the
    parent's mode, cleanup adapter and failure sink. A hosted child's unwind
    goes onto the parent's stack at the point the child was created.

    Example:
        ```python
        class T(unittest.TestCase):
            def test_it(self):
                c = Scope(self)              # hosted via addCleanup
                c.setenv("HOME", "/nowhere")
                c.patch(settings, "debug", True)
                d = c.mkdir()
                ...                          # all undone after the test

        c = Scope()                          # explicit
        try:
            c.setenv("LANG", "C")
        finally:
            c.done()
        ```
    """
    def __init__(self, host: Any = None, *, mode: Optional[str] = None, name: str = ""):
        self.name = name
        self._children: List["Scope"] = []
        self._verifier_registered = False
        if isinstance(host, Scope):
            parent: Optional[Scope] = host
            self._binding = HostBinding(fail=host.fail, register_cleanup=host.defer, host=host)
            self._adapter: Adapter = host._adapter
            self._native = host._native
            self._runner = host._runner
            default_mode = host.mode
        else:
            parent = None
            self._binding = bind(host)
            self._adapter = _default_adapter
            self._native = self._binding.register_cleanup
            self._runner = self._binding.host
            default_mode = HOSTED if self._binding.hosted else EXPLICIT
        mode = mode or default_mode
        if mode not in (EXPLICIT, HOSTED): raise ValueError(f"unknown scope mode {mode!r}")
        if mode == HOSTED and not self._binding.hosted:
            raise UsageError(f"hosted mode needs a host with a cleanup hook, got {type(host).__name__}")
        self._parent = parent
        self._mode = mode
        self._stack = ActionStack(name or mode)
        if parent is not None: parent._adopt(self)
        if mode == EXPLICIT: weakref.finalize(self, _report_abandoned, self._stack, self.name)
        if mode == HOSTED: self._binding.register_cleanup(self.done)
        logger.debug("opened %s scope %r", mode, self.name)

    def __repr__(self) -> str:
        state = "closed" if self.finished else "open"
        return f"<Scope {self.name!r} {self._mode} {state} actions={len(self._stack)}>"

    def __enter__(self) -> "Scope": return self
    def __exit__(self, et, e, tb) -> None: self.done()

    @property
    def mode(self) -> str: return self._mode
    @property
    def parent(self) -> Optional["Scope"]: return self._parent
    @property
    def finished(self) -> bool: return self._stack.done

    def _adopt(self, child: "Scope") -> None:
        self._check_children()
        if child.mode == EXPLICIT: self._children.append(child)

    def _check_children(self) -> None:
        # Control is back in this scope, so a nested explicit scope that
        # still holds actions was left without Done.
        abandoned = [c for c in self._children if c._stack.pending]
        self._children = []
        if not abandoned: return
        names = ", ".join(repr(c.name) for c in abandoned)
        try:
            for c in reversed(abandoned): c._stack.unwind()
        finally:
            raise UsageError(f"Done not called after Defer in nested scope {names}")

    def _verify_done(self) -> None:
        pending = self._stack.pending
        self._stack.unwind()
        if pending: raise UsageError("Done not called after Defer")

    def defer(self, action: Action) -> None:
        """Push `action` onto this scope's own stack.

        Raises:
            UsageError: If the scope already finished, or a nested explicit
                scope was abandoned without Done.
        """
        self._check_children()
        if self._stack.done: raise UsageError(f"Defer called after Done on scope {self.name!r}")
        if self._mode == EXPLICIT and self._parent is None and self._binding.hosted and not self._verifier_registered:
            self._verifier_registered = True
            self._binding.register_cleanup(self._verify_done)
        self._stack.push(action)
        logger.debug("deferred %r on scope %r", action, self.name)

    def cleanup(self, action: Action) -> None:
        """Register `action` with the host's cleanup hook, or defer it when there is none."""
        if self._native is None: self.defer(action)
        else: self._native(action)

    def add_cleanup(self, action: Action) -> None:
        """Register a restore action through the current cleanup adapter.

        This is what the patch primitives call; see `set_cleanup`.
        """
        self._adapter(self, action)

    def set_cleanup(self, fn: Adapter) -> None:
        """Redirect every later `add_cleanup` on this scope and its new children.

        `fn` is called as ``fn(scope, action)``.

        Example:
            ```python
            seen = []
            def observe(c, f):
                seen.append(f)
                c.defer(f)
            scope.set_cleanup(observe)
            scope.setenv("X", "1")   # seen now holds the restore action
            ```
        """
        self._adapter = fn

    def done(self) -> None:
        """Run this scope's restore actions now. Later calls do nothing."""
        try: self._check_children()
        finally: self._stack.unwind()

    def fail(self, msg: str) -> Any: return self._binding.fail(msg)

    def child(self, *, mode: Optional[str] = None, name: str = "") -> "Scope":
        return Scope(self, mode=mode, name=name)

    def run(self, name: str, body: Callable[["Scope"], Any]) -> Any:
        """Run `body` in a nested scope that is finished before returning.

        The child's own restore actions run first, then anything it sent to
        `cleanup`. Awaitable results are driven with anyio, which needs a
        caller outside any running event loop. When the runner
        supports ``subTest`` the body runs inside it.
        """
        hooks = ActionStack(f"{self.name}/{name}")
        c = Scope(self, name=name)
        c._native = hooks.push
        sub_test = getattr(self._runner, "subTest", None)
        ctx = sub_test(msg=name) if callable(sub_test) else contextlib.nullcontext()
        result = None
        logger.debug("running nested scope %r", name)
        with ctx:
            try:
                result = body(c)
                if inspect.isawaitable(result): result = _drive(result)
            finally:
                try: c.done()
                finally: hooks.unwind()
        return result

    def patch(self, target: Any, name: Any, value: Any) -> Any:
        return _patch.patch(self, target, name, value)

    def setenv(self, name: str, value: str) -> None: _patch.setenv(self, name, value)
    def unsetenv(self, name: str) -> None: _patch.unsetenv(self, name)

    def mkdir(self, prefix: Optional[str] = None, dir: Optional[str] = None) -> str:
        return _patch.mkdir(self, prefix=prefix, dir=dir)


def new(host: Any = None, **kw: Any) -> Scope:
    """Create a root scope bound to `host` (or a nested one when `host` is a Scope)."""
    return Scope(host, **kw)
