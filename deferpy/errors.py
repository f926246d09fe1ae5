from __future__ import annotations


class UsageError(RuntimeError):
    """Raised when the scope API is misused.

    These are programming mistakes (deferring after Done, forgetting Done,
    patching with an incompatible value), never expected runtime
    conditions, so callers should let them propagate.
    """


class PatchTypeError(UsageError, TypeError):
    def __init__(self, new_type: type, old_type: type):
        super().__init__(f"value of type {_qualname(new_type)} is not assignable to type {_qualname(old_type)}")
        self.new_type = new_type; self.old_type = old_type


def _qualname(t: type) -> str:
    mod = getattr(t, "__module__", "builtins")
    if mod == "builtins": return t.__qualname__
    return f"{mod}.{t.__qualname__}"
