"""Controlled and uncontrolled state holders.

A piece of select state (branch, value, input text, open flag) is either
owned by the select itself (uncontrolled) or by the caller (controlled).
The engine only ever requests changes through ``set``; a controlled holder
ignores those requests and changes only when the caller calls ``control``.
"""

from typing import Any

UNSET = object()


class ControlledValue:
    """One piece of select state.

    Args:
        name: State name, used in repr and error messages
        controlled: Caller-owned value, or UNSET for self-owned state
        default: Initial value of self-owned state
    """

    def __init__(self, name: str, controlled: Any = UNSET, default: Any = None):
        self.name = name
        self._controlled = controlled is not UNSET
        self._value = controlled if self._controlled else default
        # Bumped on every effective change
        self.version = 0

    @property
    def is_controlled(self) -> bool:
        return self._controlled

    @property
    def value(self) -> Any:
        return self._value

    def set(self, value: Any) -> None:
        """Request a change. Ignored when the state is controlled."""
        if not self._controlled:
            self._assign(value)

    def control(self, value: Any) -> None:
        """Force the value from outside, as the owning caller."""
        self._assign(value)

    def _assign(self, value: Any) -> None:
        if value is not self._value:
            self.version += 1
        self._value = value

    def __repr__(self) -> str:
        mode = "controlled" if self._controlled else "uncontrolled"
        return f"ControlledValue({self.name!r}, {self._value!r}, {mode})"
