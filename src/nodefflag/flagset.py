"""Flag registry: registration, command-line tokenizing and usage output.

A :class:`FlagSet` maps flag names to :class:`Flag` records whose ``value``
implements the adapter protocol (``str()``, ``set()``, ``get()`` and the
optional ``is_bool_flag`` / ``type_hint`` attributes).  Parsing follows the
single-dash grammar::

    -flag            boolean flags only, means "true"
    -flag=value
    -flag value      non-boolean flags only
    --flag ...       two dashes are accepted wherever one is

Parsing stops at the first non-flag token or just after ``--``; the
remaining tokens are available from :attr:`FlagSet.args`.
"""

from __future__ import annotations

import enum
import sys
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Protocol, TextIO

from nodefflag.errors import (
    DuplicateFlagError,
    FatalFlagError,
    FlagError,
    FlagSyntaxError,
    HelpRequested,
    MissingValueError,
    ParseError,
    UndefinedFlagError,
    quote,
)


class ErrorHandling(enum.Enum):
    """What :meth:`FlagSet.parse` does once it has reported an error."""

    CONTINUE = "continue"  # re-raise the error to the caller
    EXIT = "exit"  # SystemExit(2), or SystemExit(0) for -h/-help
    PANIC = "panic"  # FatalFlagError chained from the error


class Value(Protocol):
    def __str__(self) -> str: ...

    def set(self, text: str) -> None: ...

    def get(self) -> Any: ...


@dataclass
class Flag:
    """One registered flag."""

    name: str
    usage: str
    value: Value
    def_value: str  # str(value) at registration time


def _is_bool_flag(value: Value) -> bool:
    return bool(getattr(value, "is_bool_flag", False))


def unquote_usage(flag: Flag) -> tuple[str, str]:
    """Split a flag's usage text into ``(value_name, usage)``.

    A back-quoted word in the usage text names the value and loses its
    quotes: ``"a `file` to read"`` gives ``("file", "a file to read")``.
    Without one, boolean flags get no name and other values fall back to
    their ``type_hint`` (or ``"value"`` for values that have none).
    """
    usage = flag.usage
    start = usage.find("`")
    if start != -1:
        end = usage.find("`", start + 1)
        if end != -1:
            name = usage[start + 1 : end]
            return name, usage[:start] + name + usage[end + 1 :]
    if _is_bool_flag(flag.value):
        return "", usage
    return getattr(flag.value, "type_hint", "value"), usage


def format_flag_heading(flag: Flag) -> str:
    """Return the ``-name hint`` prefix and usage text of a help entry."""
    line = f"  -{flag.name}"
    name, usage = unquote_usage(flag)
    if name:
        line += " " + name
    # Single-letter flags with no value name keep their usage on one line.
    if len(line) <= 4:
        line += "\t"
    else:
        line += "\n    \t"
    return line + usage.replace("\n", "\n    \t")


# Rendered defaults that print_defaults leaves out as uninteresting.
_ZERO_TEXTS = frozenset({"", "0", "false", "0s"})


class FlagSet:
    """A named, independent set of flags plus parsing and usage behaviour."""

    def __init__(self, name: str = "", error_handling: ErrorHandling = ErrorHandling.CONTINUE) -> None:
        self.name = name
        self.error_handling = error_handling
        # Called on parse errors and -h; replace it to customise help output.
        self.usage: Callable[[], None] = self.default_usage
        self._formal: dict[str, Flag] = {}
        self._actual: dict[str, Flag] = {}
        self._args: list[str] = []
        self._parsed = False
        self._output: TextIO | None = None

    # -- configuration -----------------------------------------------------

    @property
    def output(self) -> TextIO:
        """Destination for usage and error text (``sys.stderr`` by default)."""
        return sys.stderr if self._output is None else self._output

    def set_output(self, output: TextIO | None) -> None:
        """Redirect usage and error text; ``None`` restores standard error."""
        self._output = output

    # -- registration ------------------------------------------------------

    def var(self, value: Value, name: str, usage: str) -> None:
        """Register *value* under *name*."""
        if name.startswith("-"):
            raise ValueError(f"flag {quote(name)} begins with -")
        if "=" in name:
            raise ValueError(f"flag {quote(name)} contains =")
        if name in self._formal:
            err = DuplicateFlagError(name, self.name)
            print(err, file=self.output)
            raise err
        self._formal[name] = Flag(name, usage, value, str(value))

    def lookup(self, name: str) -> Flag | None:
        return self._formal.get(name)

    def set(self, name: str, value: str) -> None:
        """Set a flag programmatically, as if ``-name=value`` had been parsed."""
        flag = self._formal.get(name)
        if flag is None:
            raise UndefinedFlagError(name)
        flag.value.set(value)
        self._actual[name] = flag

    # -- inspection --------------------------------------------------------

    def visit_all(self, fn: Callable[[Flag], None]) -> None:
        """Call *fn* for every registered flag, sorted by name."""
        for name in sorted(self._formal):
            fn(self._formal[name])

    def visit(self, fn: Callable[[Flag], None]) -> None:
        """Call *fn* for every flag that has been set, sorted by name."""
        for name in sorted(self._actual):
            fn(self._actual[name])

    def nflag(self) -> int:
        """Number of flags that have been set."""
        return len(self._actual)

    @property
    def parsed(self) -> bool:
        return self._parsed

    @property
    def args(self) -> list[str]:
        """Tokens left over after flag parsing."""
        return list(self._args)

    def narg(self) -> int:
        return len(self._args)

    def arg(self, i: int) -> str:
        """Return the *i*-th leftover token, or ``""`` if there is none."""
        if 0 <= i < len(self._args):
            return self._args[i]
        return ""

    # -- usage -------------------------------------------------------------

    def print_defaults(self) -> None:
        """Write one help entry per flag, noting non-zero default values."""

        def _print(flag: Flag) -> None:
            line = format_flag_heading(flag)
            if flag.def_value not in _ZERO_TEXTS:
                if getattr(flag.value, "type_hint", None) == "string":
                    line += f" (default {quote(flag.def_value)})"
                else:
                    line += f" (default {flag.def_value})"
            print(line, file=self.output)

        self.visit_all(_print)

    def default_usage(self) -> None:
        if self.name:
            print(f"Usage of {self.name}:", file=self.output)
        else:
            print("Usage:", file=self.output)
        self.print_defaults()

    # -- parsing -----------------------------------------------------------

    def parse(self, arguments: Iterable[str]) -> None:
        """Parse flag tokens from *arguments* (without the program name).

        Errors are written to :attr:`output` together with the usage text and
        then handled according to :attr:`error_handling`.
        """
        self._parsed = True
        self._args = list(arguments)
        try:
            while self._parse_one():
                pass
        except (FlagError, ValueError) as err:
            if self.error_handling is ErrorHandling.CONTINUE:
                raise
            if self.error_handling is ErrorHandling.EXIT:
                code = 0 if isinstance(err, HelpRequested) else 2
                raise SystemExit(code) from err
            raise FatalFlagError(str(err)) from err

    def _fail(self, err: Exception, message: str | None = None) -> Exception:
        print(str(err) if message is None else message, file=self.output)
        self.usage()
        return err

    def _parse_one(self) -> bool:
        if not self._args:
            return False
        token = self._args[0]
        if len(token) < 2 or token[0] != "-":
            return False
        num_minuses = 1
        if token[1] == "-":
            num_minuses += 1
            if len(token) == 2:  # "--" terminates the flags
                self._args = self._args[1:]
                return False
        name = token[num_minuses:]
        if not name or name[0] in "-=":
            raise self._fail(FlagSyntaxError(token))

        self._args = self._args[1:]
        name, sep, value = name.partition("=")
        has_value = bool(sep)

        flag = self._formal.get(name)
        if flag is None:
            if name in ("help", "h"):
                self.usage()
                raise HelpRequested()
            raise self._fail(UndefinedFlagError(name))

        if _is_bool_flag(flag.value):
            if has_value:
                self._set_value(flag, value, f"invalid boolean value {quote(value)} for -{name}")
            else:
                self._set_value(flag, "true", f"invalid boolean flag {name}")
        else:
            if not has_value and self._args:
                value, self._args = self._args[0], self._args[1:]
                has_value = True
            if not has_value:
                raise self._fail(MissingValueError(name))
            self._set_value(flag, value, f"invalid value {quote(value)} for flag -{name}")

        self._actual[name] = flag
        return True

    def _set_value(self, flag: Flag, value: str, context: str) -> None:
        try:
            flag.value.set(value)
        except ValueError as err:
            if isinstance(err, ParseError):
                err.flag = flag.name
            raise self._fail(err, f"{context}: {err}")
