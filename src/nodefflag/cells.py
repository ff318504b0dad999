"""Storage cells that flag values are parsed into.

An :class:`OptionalCell` starts out empty (``value is None``) and only gains
a value when its flag appears on the command line, so ``-count=0`` and "no
``-count`` at all" stay distinguishable.  A :class:`DirectCell` always holds
a value and is simply overwritten by parsing.
"""

from __future__ import annotations

from typing import Generic, TypeVar

T = TypeVar("T")


class OptionalCell(Generic[T]):
    """A value that is ``None`` until its flag is supplied."""

    __slots__ = ("value",)

    def __init__(self, value: T | None = None) -> None:
        self.value = value

    @property
    def is_set(self) -> bool:
        return self.value is not None

    def get(self, default: T | None = None) -> T | None:
        """Return the parsed value, or *default* if the flag was not given."""
        return default if self.value is None else self.value

    def __repr__(self) -> str:
        return f"OptionalCell({self.value!r})"


class DirectCell(Generic[T]):
    """A value slot, pre-filled with a zero value and overwritten on parse."""

    __slots__ = ("value",)

    def __init__(self, value: T) -> None:
        self.value = value

    def __repr__(self) -> str:
        return f"DirectCell({self.value!r})"
