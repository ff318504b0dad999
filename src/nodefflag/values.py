"""Typed value adapters bound to flag cells.

Every adapter exposes the small protocol the registry in
:mod:`nodefflag.flagset` relies on:

- ``str(adapter)`` returns the example text captured at registration;
- ``adapter.set(text)`` parses *text* and stores it, raising
  :class:`~nodefflag.errors.ParseError` without touching the cell on failure;
- ``adapter.get()`` returns what the cell currently holds;
- ``adapter.is_bool_flag`` marks flags that may appear without a value;
- ``adapter.type_hint`` names the value in usage output.

The per-type behaviour lives in a :class:`Kind` record, so the two adapter
styles are written once and specialised by tiny per-type subclasses.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Generic, TypeVar

from nodefflag.cells import DirectCell, OptionalCell
from nodefflag.parsing import (
    format_bool,
    format_duration,
    format_float,
    format_int,
    format_string,
    parse_bool,
    parse_duration,
    parse_float64,
    parse_int,
    parse_int64,
    parse_string,
    parse_uint,
    parse_uint64,
)

T = TypeVar("T")


@dataclass(frozen=True)
class Kind(Generic[T]):
    """Grammar, zero value and display data for one primitive flag type."""

    name: str
    parse: Callable[[str], T]
    format: Callable[[T], str]
    zero: T
    type_hint: str
    is_bool: bool = False


STRING: Kind[str] = Kind("string", parse_string, format_string, "", "string")
BOOL: Kind[bool] = Kind("bool", parse_bool, format_bool, False, "", is_bool=True)
INT: Kind[int] = Kind("int", parse_int, format_int, 0, "int")
INT64: Kind[int] = Kind("int64", parse_int64, format_int, 0, "int")
UINT: Kind[int] = Kind("uint", parse_uint, format_int, 0, "uint")
UINT64: Kind[int] = Kind("uint64", parse_uint64, format_int, 0, "uint")
FLOAT64: Kind[float] = Kind("float64", parse_float64, format_float, 0.0, "float")
DURATION: Kind[timedelta] = Kind(
    "duration", parse_duration, format_duration, timedelta(0), "duration"
)

KINDS: dict[str, Kind[Any]] = {
    kind.name: kind for kind in (STRING, BOOL, INT, INT64, UINT, UINT64, FLOAT64, DURATION)
}


class FlagValue:
    """Common base of the optional and direct adapters."""

    kind: Kind[Any]
    cell_type: type = object

    def __init__(self, cell: Any, example: str) -> None:
        if not isinstance(cell, self.cell_type):
            raise TypeError(
                f"{type(self).__name__} requires {self.cell_type.__name__}, "
                f"got {type(cell).__name__}"
            )
        self.cell = cell
        self.example = example

    def __str__(self) -> str:
        return self.example

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.cell!r}, example={self.example!r})"

    @property
    def is_bool_flag(self) -> bool:
        return self.kind.is_bool

    @property
    def type_hint(self) -> str:
        return self.kind.type_hint

    def set(self, text: str) -> None:
        # Parse before assigning so a failure leaves the cell untouched.
        self.cell.value = self.kind.parse(text)

    def get(self) -> Any:
        return self.cell.value


class OptionalValue(FlagValue):
    """Adapter whose cell stays ``None`` until the flag is supplied."""

    cell_type = OptionalCell


class DirectValue(FlagValue):
    """Adapter that overwrites a zero-initialised cell in place."""

    cell_type = DirectCell


class OptionalString(OptionalValue):
    kind = STRING


class OptionalBool(OptionalValue):
    kind = BOOL


class OptionalInt(OptionalValue):
    kind = INT


class OptionalInt64(OptionalValue):
    kind = INT64


class OptionalUint(OptionalValue):
    kind = UINT


class OptionalUint64(OptionalValue):
    kind = UINT64


class OptionalFloat64(OptionalValue):
    kind = FLOAT64


class OptionalDuration(OptionalValue):
    kind = DURATION


class DirectString(DirectValue):
    kind = STRING


class DirectBool(DirectValue):
    kind = BOOL


class DirectInt(DirectValue):
    kind = INT


class DirectInt64(DirectValue):
    kind = INT64


class DirectUint(DirectValue):
    kind = UINT


class DirectUint64(DirectValue):
    kind = UINT64


class DirectFloat64(DirectValue):
    kind = FLOAT64


class DirectDuration(DirectValue):
    kind = DURATION
