"""Textual grammars for the primitive flag types.

Each ``parse_*`` function accepts exactly one strict literal grammar
(boolean words, base-10 integers of a fixed width, float literals and unit
suffixed durations) and raises :class:`~nodefflag.errors.ParseError` or
:class:`~nodefflag.errors.RangeError` for anything else.  Python's own ``int()`` and ``float()`` are deliberately
not used on raw input: they accept whitespace, underscores and non-ASCII
digits, none of which are valid on a command line.

The ``format_*`` functions produce the canonical text used to render
example values in usage output::

    >>> format_float(1e6)
    '1e+06'
    >>> format_duration(timedelta(hours=1, minutes=30))
    '1h30m0s'
"""

from __future__ import annotations

import math
import re
from datetime import timedelta
from decimal import Decimal
from fractions import Fraction

from nodefflag.errors import ParseError, RangeError, quote

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1
UINT64_MAX = (1 << 64) - 1
UINT_MAX = (1 << 32) - 1

_SIGNED_RE = re.compile(r"[+-]?[0-9]+")
_UNSIGNED_RE = re.compile(r"[0-9]+")
_DECIMAL_FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_HEX_FLOAT_RE = re.compile(
    r"[+-]?0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)[pP][+-]?[0-9]+"
)
_INF_RE = re.compile(r"[+-]?inf(?:inity)?", re.IGNORECASE)
_NAN_RE = re.compile(r"nan", re.IGNORECASE)

# Longest digit run, leading zeros aside, that can fit in 64 bits.
_MAX_DIGITS = 20
# Fraction digits past this are far below nanosecond precision.
_MAX_FRACTION_DIGITS = 30

_TRUE = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE = frozenset({"0", "f", "F", "FALSE", "false", "False"})

_NANOSECOND = 1
_MICROSECOND = 1000 * _NANOSECOND
_MILLISECOND = 1000 * _MICROSECOND
_SECOND = 1000 * _MILLISECOND
_MINUTE = 60 * _SECOND
_HOUR = 60 * _MINUTE

_DURATION_UNITS: dict[str, int] = {
    "ns": _NANOSECOND,
    "us": _MICROSECOND,
    "µs": _MICROSECOND,  # micro sign
    "μs": _MICROSECOND,  # greek small letter mu
    "ms": _MILLISECOND,
    "s": _SECOND,
    "m": _MINUTE,
    "h": _HOUR,
}

_DURATION_NUMBER_RE = re.compile(r"([0-9]*)(?:\.([0-9]*))?")
_DURATION_UNIT_RE = re.compile(r"[^0-9.]*")


# ---------------------------------------------------------------------------
# Parsers
# ---------------------------------------------------------------------------


def parse_string(text: str) -> str:
    return text


def parse_bool(text: str) -> bool:
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ParseError(text)


def _significant(text: str, digits: str, reason: str = "value out of range") -> str:
    """Strip leading zeros from *digits*, rejecting runs too long for 64 bits."""
    digits = digits.lstrip("0")
    if len(digits) > _MAX_DIGITS:
        raise RangeError(text, reason)
    return digits or "0"


def _parse_signed(text: str, low: int, high: int) -> int:
    if not _SIGNED_RE.fullmatch(text):
        raise ParseError(text)
    value = int(_significant(text, text.lstrip("+-")))
    if text.startswith("-"):
        value = -value
    if not low <= value <= high:
        raise RangeError(text)
    return value


def parse_int(text: str) -> int:
    return _parse_signed(text, INT64_MIN, INT64_MAX)


def parse_int64(text: str) -> int:
    return _parse_signed(text, INT64_MIN, INT64_MAX)


def parse_uint64(text: str) -> int:
    if not _UNSIGNED_RE.fullmatch(text):
        raise ParseError(text)
    value = int(_significant(text, text))
    if value > UINT64_MAX:
        raise RangeError(text)
    return value


def parse_uint(text: str) -> int:
    """Parse an unsigned integer that must fit the 32-bit ``uint`` width.

    The text is first parsed as a 64-bit unsigned value; narrowing to 32
    bits then raises :class:`RangeError` instead of truncating.
    """
    value = parse_uint64(text)
    if value > UINT_MAX:
        raise RangeError(text, "value out of range for uint")
    return value


def parse_float64(text: str) -> float:
    """Parse a decimal or hexadecimal float literal, ``inf`` or ``nan``.

    Finite literals too large for a double raise :class:`RangeError`;
    literals too small silently round to zero.
    """
    if _INF_RE.fullmatch(text):
        return -math.inf if text.startswith("-") else math.inf
    if _NAN_RE.fullmatch(text):
        return math.nan
    if _HEX_FLOAT_RE.fullmatch(text):
        try:
            return float.fromhex(text)
        except OverflowError:
            raise RangeError(text) from None
    if not _DECIMAL_FLOAT_RE.fullmatch(text):
        raise ParseError(text)
    value = float(text)
    if math.isinf(value):
        raise RangeError(text)
    return value


def parse_duration(text: str) -> timedelta:
    """Parse a duration such as ``300ms``, ``-1.5h`` or ``2h45m``.

    A duration is an optionally signed sequence of decimal numbers, each with
    an optional fraction and a required unit suffix.  The bare literal ``0``
    needs no unit.  Values are computed exactly in nanoseconds and must fit
    a signed 64-bit count; the resulting :class:`~datetime.timedelta` rounds
    anything below a microsecond.
    """
    rest = text
    negative = False
    if rest[:1] in ("-", "+"):
        negative = rest[0] == "-"
        rest = rest[1:]
    if rest == "0":
        return timedelta(0)
    if not rest:
        raise ParseError(text, "invalid duration")

    total = 0
    while rest:
        if not (rest[0] == "." or "0" <= rest[0] <= "9"):
            raise ParseError(text, "invalid duration")
        number = _DURATION_NUMBER_RE.match(rest)
        whole, fraction = number.group(1), number.group(2)
        if not whole and not fraction:
            raise ParseError(text, "invalid duration")
        rest = rest[number.end() :]

        unit_text = _DURATION_UNIT_RE.match(rest).group(0)
        if not unit_text:
            raise ParseError(text, "missing unit in duration")
        unit = _DURATION_UNITS.get(unit_text)
        if unit is None:
            raise ParseError(text, f"unknown unit {quote(unit_text)} in duration")
        rest = rest[len(unit_text) :]

        amount = int(_significant(text, whole, "invalid duration")) * unit
        fraction = (fraction or "")[:_MAX_FRACTION_DIGITS]
        if fraction:
            amount += math.floor(Fraction(int(fraction), 10 ** len(fraction)) * unit)
        total += amount
        if total > INT64_MAX + 1:
            raise RangeError(text, "invalid duration")

    if negative:
        total = -total
    elif total > INT64_MAX:
        raise RangeError(text, "invalid duration")
    return _timedelta_from_ns(total)


def _timedelta_from_ns(nanoseconds: int) -> timedelta:
    seconds, remainder = divmod(nanoseconds, _SECOND)
    return timedelta(seconds=seconds, microseconds=remainder / _MICROSECOND)


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------


def format_string(value: str) -> str:
    return value


def format_bool(value: bool) -> str:
    return "true" if value else "false"


def format_int(value: int) -> str:
    return str(int(value))


def format_float(value: float) -> str:
    """Format *value* with the shortest round-trip digits in ``%g`` style.

    Exponent notation is used when the decimal exponent is below -4 or at
    least 6 (``1e+06``, ``1e-05``), with a signed, two-digit-minimum
    exponent.  Infinities render as ``+Inf``/``-Inf``.
    """
    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"

    sign, digit_tuple, exponent = Decimal(repr(value)).as_tuple()
    digits = "".join(str(d) for d in digit_tuple).rstrip("0")
    exponent += len(digit_tuple) - len(digits)
    # Position of the decimal point relative to the first digit.
    point = len(digits) + exponent
    prefix = "-" if sign else ""

    exp10 = point - 1
    if exp10 < -4 or exp10 >= 6:
        mantissa = digits[0]
        if len(digits) > 1:
            mantissa += "." + digits[1:]
        exp_sign = "-" if exp10 < 0 else "+"
        return f"{prefix}{mantissa}e{exp_sign}{abs(exp10):02d}"
    if point <= 0:
        return f"{prefix}0.{'0' * -point}{digits}"
    if point >= len(digits):
        return prefix + digits + "0" * (point - len(digits))
    return f"{prefix}{digits[:point]}.{digits[point:]}"


def _fixed(value: int, places: int) -> str:
    whole, frac = divmod(value, 10**places)
    if not frac:
        return str(whole)
    return f"{whole}.{str(frac).rjust(places, '0').rstrip('0')}"


def format_duration(value: timedelta) -> str:
    """Render a duration as ``72h3m0.5s``, ``1.5ms``, ``250µs`` or ``0s``.

    Durations under a second use the largest of ``ms``/``µs`` that keeps an
    integer part; longer ones spell out hours and minutes with a
    fractional-seconds tail.
    """
    nanoseconds = (value // timedelta(microseconds=1)) * _MICROSECOND
    if nanoseconds == 0:
        return "0s"
    sign = "-" if nanoseconds < 0 else ""
    magnitude = abs(nanoseconds)

    if magnitude < _SECOND:
        if magnitude < _MILLISECOND:
            return f"{sign}{_fixed(magnitude, 3)}µs"
        return f"{sign}{_fixed(magnitude, 6)}ms"

    seconds, frac = divmod(magnitude, _SECOND)
    minutes, seconds = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    tail = _fixed(seconds * _SECOND + frac, 9) + "s"
    if hours:
        return f"{sign}{hours}h{minutes}m{tail}"
    if minutes:
        return f"{sign}{minutes}m{tail}"
    return sign + tail
