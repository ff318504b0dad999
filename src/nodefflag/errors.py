"""Exception hierarchy shared by the registry, the adapters and the CLI.

Every error derives from :class:`FlagError` so callers can catch the whole
family with one clause.  Type-grammar failures additionally derive from
:class:`ValueError`, matching what ``int()``/``float()`` raise for bad text.
"""

from __future__ import annotations

_ESCAPES = {
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
    "\\": "\\\\",
    '"': '\\"',
}


def quote(text: str) -> str:
    """Return *text* as a double-quoted, backslash-escaped literal.

    Printable characters are kept as they are; other ASCII characters become
    ``\\xNN`` and the rest ``\\uNNNN`` or ``\\UNNNNNNNN``.
    """
    out = []
    for ch in text:
        code = ord(ch)
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif ch.isprintable():
            out.append(ch)
        elif code < 0x80:
            out.append(f"\\x{code:02x}")
        elif code < 0x10000:
            out.append(f"\\u{code:04x}")
        else:
            out.append(f"\\U{code:08x}")
    return '"' + "".join(out) + '"'


class FlagError(Exception):
    """Base class for every error raised by nodefflag."""


class ParseError(FlagError, ValueError):
    """A token is not in the textual grammar of the flag's type."""

    def __init__(self, text: str, reason: str = "invalid syntax", flag: str | None = None) -> None:
        super().__init__(text, reason)
        self.text = text
        self.reason = reason
        # Filled in by the registry once it knows which flag was being set.
        self.flag = flag

    def __str__(self) -> str:
        return f"parsing {quote(self.text)}: {self.reason}"


class RangeError(ParseError):
    """A token is grammatical but does not fit the target type."""

    def __init__(self, text: str, reason: str = "value out of range", flag: str | None = None) -> None:
        super().__init__(text, reason, flag)


class DuplicateFlagError(FlagError):
    """A flag name was registered twice on the same flag set."""

    def __init__(self, name: str, set_name: str = "") -> None:
        super().__init__(name, set_name)
        self.name = name
        self.set_name = set_name

    def __str__(self) -> str:
        if self.set_name:
            return f"{self.set_name} flag redefined: {self.name}"
        return f"flag redefined: {self.name}"


class UndefinedFlagError(FlagError):
    """The command line names a flag that was never registered."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"flag provided but not defined: -{self.name}"


class FlagSyntaxError(FlagError):
    """A token starts like a flag but cannot name one (``---x``, ``-=x``)."""

    def __init__(self, token: str) -> None:
        super().__init__(token)
        self.token = token

    def __str__(self) -> str:
        return f"bad flag syntax: {self.token}"


class MissingValueError(FlagError):
    """A non-boolean flag was the last token and has no value."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"flag needs an argument: -{self.name}"


class HelpRequested(FlagError):
    """``-h`` or ``-help`` was given and no such flag is registered."""

    def __str__(self) -> str:
        return "flag: help requested"


class ConfigError(FlagError):
    """A flag declaration file is malformed."""


class FatalFlagError(RuntimeError):
    """Raised instead of returning when the flag set uses the PANIC policy."""
