"""Shared CLI helpers for the nodefflag commands.

Provides standardised error / JSON output and the conversion of parsed
cells into printable state, so each command reports results the same way.
"""

from __future__ import annotations

import json
import math
from typing import Any, NoReturn

import typer
from rich.console import Console

from nodefflag.cells import DirectCell, OptionalCell
from nodefflag.flagset import Flag
from nodefflag.values import DURATION, FLOAT64, Kind

# ---------------------------------------------------------------------------
# Standardised output helpers
# ---------------------------------------------------------------------------

_err_console = Console(stderr=True)


def error_exit(msg: str, *, json_mode: bool = False, code: int = 1) -> NoReturn:
    """Print *msg* as an error and ``raise typer.Exit(code)``."""
    if json_mode:
        print(json.dumps({"error": msg}, indent=2))
    else:
        _err_console.print(f"[red bold]error:[/red bold] {msg}", markup=True, highlight=False)
    raise typer.Exit(code=code)


def json_print(data: dict[str, Any] | list[Any]) -> None:
    """Print *data* as pretty-printed JSON to stdout."""
    print(json.dumps(data, indent=2))


# ---------------------------------------------------------------------------
# Cell state
# ---------------------------------------------------------------------------


def json_value(kind: Kind[Any], value: Any) -> Any:
    """Return *value* in a form ``json.dumps`` accepts."""
    if value is None:
        return None
    if kind is DURATION:
        return kind.format(value)
    if kind is FLOAT64 and (math.isinf(value) or math.isnan(value)):  # no JSON literal
        return kind.format(value)
    return value


def cell_state(flag: Flag, cell: OptionalCell[Any] | DirectCell[Any], seen: bool) -> dict[str, Any]:
    """Describe one flag after parsing.

    ``set`` reports what the cell itself can tell: presence for optional
    cells, and whether the flag appeared on the command line for direct
    cells (which cannot tell on their own).
    """
    kind = flag.value.kind
    is_set = cell.is_set if isinstance(cell, OptionalCell) else seen
    return {
        "type": kind.name,
        "style": "nd" if isinstance(cell, OptionalCell) else "zv",
        "set": is_set,
        "value": json_value(kind, cell.value),
        "example": flag.def_value,
    }
