"""Flag set with "no default" and "zero value" registration helpers.

The ``nd_*`` ("no default") helpers bind a flag to an :class:`OptionalCell`
whose value stays ``None`` unless the flag appears on the command line, so a
caller can tell ``-count=0`` apart from no ``-count`` at all.  The ``zv_*``
("zero value") helpers bind a :class:`DirectCell` that starts at the type's
zero value and cannot make that distinction.

In both cases the *example* argument is display text only: it shows up in
the usage output as ``(example ...)`` and is never stored in the cell.

Example::

    import sys
    from nodefflag import ErrorHandling, NDFlagSet

    flags = NDFlagSet(sys.argv[0], ErrorHandling.EXIT)
    verbose = flags.nd_bool("verbose", True, "log every request")
    label = flags.nd_string("label", "example", "a `name` for this run")
    flags.parse(sys.argv[1:])

    # No -verbose:          verbose.value is None
    # -verbose / -verbose=1: verbose.value is True
    # -label="":            label.value == ""
"""

from __future__ import annotations

from datetime import timedelta

from nodefflag.cells import DirectCell, OptionalCell
from nodefflag.errors import quote
from nodefflag.flagset import Flag, FlagSet, format_flag_heading
from nodefflag.parsing import format_bool, format_duration, format_float, format_int
from nodefflag.values import (
    BOOL,
    DURATION,
    FLOAT64,
    INT,
    INT64,
    STRING,
    UINT,
    UINT64,
    DirectBool,
    DirectDuration,
    DirectFloat64,
    DirectInt,
    DirectInt64,
    DirectString,
    DirectUint,
    DirectUint64,
    OptionalBool,
    OptionalDuration,
    OptionalFloat64,
    OptionalInt,
    OptionalInt64,
    OptionalString,
    OptionalUint,
    OptionalUint64,
)


class NDFlagSet(FlagSet):
    """A :class:`FlagSet` whose usage output lists each flag's example."""

    def print_defaults(self) -> None:
        """Write one help entry per flag, ending in ``(example ...)``.

        String examples are quoted for both ``nd_string`` and ``zv_string``
        flags (not only the no-default style) so that empty or
        space-containing examples stay visible.
        """

        def _print(flag: Flag) -> None:
            line = format_flag_heading(flag)
            if getattr(flag.value, "kind", None) is STRING:
                line += f" (example {quote(flag.def_value)})"
            else:
                line += f" (example {flag.def_value})"
            print(line, file=self.output)

        self.visit_all(_print)

    # -- string --------------------------------------------------------------

    def nd_string(self, name: str, example: str, usage: str) -> OptionalCell[str]:
        """Register a string flag; the cell stays ``None`` if it is not given.

        This separates an explicit empty string (``-name=""``) from an
        absent flag.
        """
        cell: OptionalCell[str] = OptionalCell()
        self.nd_string_var(cell, name, example, usage)
        return cell

    def nd_string_var(self, cell: OptionalCell[str], name: str, example: str, usage: str) -> None:
        """Like :meth:`nd_string`, but parses into a caller-supplied cell."""
        self.var(OptionalString(cell, example), name, usage)

    def zv_string(self, name: str, example: str, usage: str) -> DirectCell[str]:
        """Register a string flag whose cell starts as ``""``."""
        cell = DirectCell(STRING.zero)
        self.zv_string_var(cell, name, example, usage)
        return cell

    def zv_string_var(self, cell: DirectCell[str], name: str, example: str, usage: str) -> None:
        self.var(DirectString(cell, example), name, usage)

    # -- bool ----------------------------------------------------------------

    def nd_bool(self, name: str, example: bool, usage: str) -> OptionalCell[bool]:
        """Register a boolean flag; ``None`` unless given, bare ``-name`` is ``True``."""
        cell: OptionalCell[bool] = OptionalCell()
        self.nd_bool_var(cell, name, example, usage)
        return cell

    def nd_bool_var(self, cell: OptionalCell[bool], name: str, example: bool, usage: str) -> None:
        self.var(OptionalBool(cell, format_bool(example)), name, usage)

    def zv_bool(self, name: str, example: bool, usage: str) -> DirectCell[bool]:
        """Register a boolean flag whose cell starts as ``False``."""
        cell = DirectCell(BOOL.zero)
        self.zv_bool_var(cell, name, example, usage)
        return cell

    def zv_bool_var(self, cell: DirectCell[bool], name: str, example: bool, usage: str) -> None:
        self.var(DirectBool(cell, format_bool(example)), name, usage)

    # -- int -----------------------------------------------------------------

    def nd_int(self, name: str, example: int, usage: str) -> OptionalCell[int]:
        """Register a signed integer flag; ``None`` unless given."""
        cell: OptionalCell[int] = OptionalCell()
        self.nd_int_var(cell, name, example, usage)
        return cell

    def nd_int_var(self, cell: OptionalCell[int], name: str, example: int, usage: str) -> None:
        self.var(OptionalInt(cell, format_int(example)), name, usage)

    def zv_int(self, name: str, example: int, usage: str) -> DirectCell[int]:
        cell = DirectCell(INT.zero)
        self.zv_int_var(cell, name, example, usage)
        return cell

    def zv_int_var(self, cell: DirectCell[int], name: str, example: int, usage: str) -> None:
        self.var(DirectInt(cell, format_int(example)), name, usage)

    # -- int64 ---------------------------------------------------------------

    def nd_int64(self, name: str, example: int, usage: str) -> OptionalCell[int]:
        """Register a 64-bit signed integer flag; ``None`` unless given."""
        cell: OptionalCell[int] = OptionalCell()
        self.nd_int64_var(cell, name, example, usage)
        return cell

    def nd_int64_var(self, cell: OptionalCell[int], name: str, example: int, usage: str) -> None:
        self.var(OptionalInt64(cell, format_int(example)), name, usage)

    def zv_int64(self, name: str, example: int, usage: str) -> DirectCell[int]:
        cell = DirectCell(INT64.zero)
        self.zv_int64_var(cell, name, example, usage)
        return cell

    def zv_int64_var(self, cell: DirectCell[int], name: str, example: int, usage: str) -> None:
        self.var(DirectInt64(cell, format_int(example)), name, usage)

    # -- uint ----------------------------------------------------------------

    def nd_uint(self, name: str, example: int, usage: str) -> OptionalCell[int]:
        """Register a 32-bit unsigned integer flag; ``None`` unless given.

        Values above ``2**32 - 1`` are rejected with a range error rather
        than truncated.
        """
        cell: OptionalCell[int] = OptionalCell()
        self.nd_uint_var(cell, name, example, usage)
        return cell

    def nd_uint_var(self, cell: OptionalCell[int], name: str, example: int, usage: str) -> None:
        self.var(OptionalUint(cell, format_int(example)), name, usage)

    def zv_uint(self, name: str, example: int, usage: str) -> DirectCell[int]:
        cell = DirectCell(UINT.zero)
        self.zv_uint_var(cell, name, example, usage)
        return cell

    def zv_uint_var(self, cell: DirectCell[int], name: str, example: int, usage: str) -> None:
        self.var(DirectUint(cell, format_int(example)), name, usage)

    # -- uint64 --------------------------------------------------------------

    def nd_uint64(self, name: str, example: int, usage: str) -> OptionalCell[int]:
        cell: OptionalCell[int] = OptionalCell()
        self.nd_uint64_var(cell, name, example, usage)
        return cell

    def nd_uint64_var(self, cell: OptionalCell[int], name: str, example: int, usage: str) -> None:
        self.var(OptionalUint64(cell, format_int(example)), name, usage)

    def zv_uint64(self, name: str, example: int, usage: str) -> DirectCell[int]:
        cell = DirectCell(UINT64.zero)
        self.zv_uint64_var(cell, name, example, usage)
        return cell

    def zv_uint64_var(self, cell: DirectCell[int], name: str, example: int, usage: str) -> None:
        self.var(DirectUint64(cell, format_int(example)), name, usage)

    # -- float64 -------------------------------------------------------------

    def nd_float64(self, name: str, example: float, usage: str) -> OptionalCell[float]:
        """Register a float flag; ``None`` unless given.

        The example is shown in shortest ``%g`` form, e.g. ``0.5`` or
        ``1e+06``.
        """
        cell: OptionalCell[float] = OptionalCell()
        self.nd_float64_var(cell, name, example, usage)
        return cell

    def nd_float64_var(self, cell: OptionalCell[float], name: str, example: float, usage: str) -> None:
        self.var(OptionalFloat64(cell, format_float(example)), name, usage)

    def zv_float64(self, name: str, example: float, usage: str) -> DirectCell[float]:
        cell = DirectCell(FLOAT64.zero)
        self.zv_float64_var(cell, name, example, usage)
        return cell

    def zv_float64_var(self, cell: DirectCell[float], name: str, example: float, usage: str) -> None:
        self.var(DirectFloat64(cell, format_float(example)), name, usage)

    # -- duration ------------------------------------------------------------

    def nd_duration(self, name: str, example: timedelta, usage: str) -> OptionalCell[timedelta]:
        """Register a duration flag (``300ms``, ``1h30m``); ``None`` unless given."""
        cell: OptionalCell[timedelta] = OptionalCell()
        self.nd_duration_var(cell, name, example, usage)
        return cell

    def nd_duration_var(
        self, cell: OptionalCell[timedelta], name: str, example: timedelta, usage: str
    ) -> None:
        self.var(OptionalDuration(cell, format_duration(example)), name, usage)

    def zv_duration(self, name: str, example: timedelta, usage: str) -> DirectCell[timedelta]:
        cell = DirectCell(DURATION.zero)
        self.zv_duration_var(cell, name, example, usage)
        return cell

    def zv_duration_var(
        self, cell: DirectCell[timedelta], name: str, example: timedelta, usage: str
    ) -> None:
        self.var(DirectDuration(cell, format_duration(example)), name, usage)
