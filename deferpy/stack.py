from __future__ import annotations
import logging
import threading
from typing import Callable, List, Optional

from .errors import UsageError

logger = logging.getLogger(__name__)

Action = Callable[[], None]


class ActionStack:
    """Ordered stack of restore actions with a sealed terminal state.

    Actions run in LIFO order (Last In, First Out) exactly once. Once the
    stack has been unwound it is sealed and rejects further actions.

    Example:
        ```python
        stack = ActionStack()
        stack.push(lambda: print("first pushed"))
        stack.push(lambda: print("second pushed"))
        stack.unwind()  # prints "second pushed", then "first pushed"
        stack.unwind()  # no-op
        ```
    """
    def __init__(self, name: str = ""):
        self.name = name
        self._actions: List[Action] = []
        self._done = False
        self._lock = threading.Lock()

    def __len__(self) -> int: return len(self._actions)

    @property
    def done(self) -> bool: return self._done

    @property
    def pending(self) -> bool:
        """True while actions are registered that have not run yet."""
        return not self._done and bool(self._actions)

    def push(self, action: Action) -> None:
        """Append a restore action to the top of the stack.

        Raises:
            UsageError: If the stack was already unwound, or if `action`
                is not callable.
        """
        if not callable(action): raise UsageError(f"restore action must be callable, got {type(action).__name__}")
        with self._lock:
            if self._done: raise UsageError(f"cannot register a restore action on unwound stack {self.name!r}")
            self._actions.append(action)

    def unwind(self) -> None:
        """Seal the stack and run every action in reverse order.

        Registration is closed before the first action runs. All actions
        run even if some fail; the first failure is re-raised once every
        action has run. Calling unwind again returns immediately.
        """
        with self._lock:
            if self._done: return
            self._done = True
            actions, self._actions = self._actions, []
        logger.debug("unwinding %d restore action(s) on %r", len(actions), self.name)
        first: Optional[BaseException] = None
        while actions:
            action = actions.pop()
            try: action()
            except Exception as ex:
                if first is None: first = ex
                else: logger.warning("restore action on %r failed after an earlier failure: %r", self.name, ex)
        if first is not None: raise first
