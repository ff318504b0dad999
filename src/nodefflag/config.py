"""Flag declaration files.

A declaration file is a small TOML document describing a flag set, so that
flags can be tried against an argument list from the shell without writing
any Python::

    name = "server"

    [flags.count]
    type = "uint64"
    example = 0
    usage = "number of `items` to fetch"

    [flags.timeout]
    type = "duration"
    example = "30s"
    style = "zv"

``type`` is one of ``string``, ``bool``, ``int``, ``int64``, ``uint``,
``uint64``, ``float64`` or ``duration``.  ``style`` is ``"nd"`` (the default;
the cell stays ``None`` until the flag is given) or ``"zv"`` (the cell starts
at the zero value).  ``example`` may be written either as a native TOML value
or as text in the flag's own command-line grammar.

Usage::

    from nodefflag.config import build_flagset, load_spec

    spec = load_spec(Path("flags.toml"))
    flags, cells = build_flagset(spec)
    flags.parse(sys.argv[1:])
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any

from nodefflag.cells import DirectCell, OptionalCell
from nodefflag.errors import ConfigError, ParseError
from nodefflag.flagset import ErrorHandling
from nodefflag.ndflagset import NDFlagSet
from nodefflag.values import BOOL, DURATION, FLOAT64, KINDS, STRING, Kind

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomllib  # type: ignore[import]
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore[import,no-redef]

STYLES = ("nd", "zv")


@dataclass
class FlagSpec:
    """One ``[flags.<name>]`` table."""

    name: str
    type: str
    example: Any
    usage: str = ""
    style: str = "nd"

    @property
    def kind(self) -> Kind[Any]:
        return KINDS[self.type]


@dataclass
class FlagSetSpec:
    """A parsed declaration file."""

    name: str = ""
    flags: list[FlagSpec] = field(default_factory=list)
    path: Path | None = None


def _coerce_example(kind: Kind[Any], raw: Any, where: str) -> Any:
    """Turn a TOML example value into the Python type *kind* formats."""
    if raw is None:
        return kind.zero
    if isinstance(raw, str) and kind is not STRING:
        try:
            return kind.parse(raw)
        except ParseError as exc:
            raise ConfigError(f"{where}: invalid example: {exc}") from exc
    if kind is STRING:
        ok = isinstance(raw, str)
    elif kind is BOOL:
        ok = isinstance(raw, bool)
    elif kind is FLOAT64:
        ok = isinstance(raw, (int, float)) and not isinstance(raw, bool)
        raw = float(raw) if ok else raw
    elif kind is DURATION:
        # Bare numbers are seconds.
        ok = isinstance(raw, (int, float)) and not isinstance(raw, bool)
        raw = timedelta(seconds=raw) if ok else raw
    else:
        ok = isinstance(raw, int) and not isinstance(raw, bool)
        if ok:
            try:
                kind.parse(str(raw))
            except ParseError as exc:
                raise ConfigError(f"{where}: invalid example: {exc}") from exc
    if not ok:
        raise ConfigError(
            f"{where}: example {raw!r} is not a valid {kind.name} value"
        )
    return raw


def _parse_flag(name: str, table: Any) -> FlagSpec:
    where = f"flags.{name}"
    if not isinstance(table, dict):
        raise ConfigError(f"{where}: expected a table")

    type_name = table.get("type")
    if type_name not in KINDS:
        raise ConfigError(
            f"{where}: unknown type {type_name!r}; expected one of {sorted(KINDS)}"
        )
    style = table.get("style", "nd")
    if style not in STYLES:
        raise ConfigError(f"{where}: unknown style {style!r}; expected 'nd' or 'zv'")
    usage = table.get("usage", "")
    if not isinstance(usage, str):
        raise ConfigError(f"{where}: usage must be a string")

    unknown = set(table) - {"type", "style", "usage", "example"}
    if unknown:
        raise ConfigError(f"{where}: unknown keys {sorted(unknown)}")

    example = _coerce_example(KINDS[type_name], table.get("example"), where)
    return FlagSpec(name=name, type=type_name, example=example, usage=usage, style=style)


def load_spec(path: Path) -> FlagSetSpec:
    """Load and validate a flag declaration file."""
    if not path.exists():
        raise FileNotFoundError(f"Flag declaration file not found: {path}")

    with open(path, "rb") as f:
        try:
            raw = tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"{path}: {exc}") from exc

    name = raw.get("name", "")
    if not isinstance(name, str):
        raise ConfigError(f"{path}: name must be a string")
    flags_table = raw.get("flags", {})
    if not isinstance(flags_table, dict):
        raise ConfigError(f"{path}: [flags] must be a table")

    # TOML tables keep file order, and flags are registered in that order.
    flags = [_parse_flag(flag_name, table) for flag_name, table in flags_table.items()]
    return FlagSetSpec(name=name, flags=flags, path=path)


def build_flagset(
    spec: FlagSetSpec,
    error_handling: ErrorHandling = ErrorHandling.CONTINUE,
) -> tuple[NDFlagSet, dict[str, OptionalCell[Any] | DirectCell[Any]]]:
    """Register every declared flag on a new :class:`NDFlagSet`.

    Returns the flag set and a mapping from flag name to its cell.
    """
    flagset = NDFlagSet(spec.name, error_handling)
    cells: dict[str, OptionalCell[Any] | DirectCell[Any]] = {}
    for flag in spec.flags:
        register = getattr(flagset, f"{flag.style}_{flag.type}")
        cells[flag.name] = register(flag.name, flag.example, flag.usage)
    return flagset, cells
