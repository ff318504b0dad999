"""nodefflag: command-line flags that know whether they were given.

Registers typed flags on a single-dash flag set and binds each one to a
cell.  "No default" flags leave their cell at ``None`` unless they appear
on the command line; "zero value" flags start at the type's zero value.
"""

from nodefflag.cells import DirectCell, OptionalCell
from nodefflag.errors import (
    ConfigError,
    DuplicateFlagError,
    FatalFlagError,
    FlagError,
    FlagSyntaxError,
    HelpRequested,
    MissingValueError,
    ParseError,
    RangeError,
    UndefinedFlagError,
)
from nodefflag.flagset import ErrorHandling, Flag, FlagSet
from nodefflag.ndflagset import NDFlagSet

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "DirectCell",
    "DuplicateFlagError",
    "ErrorHandling",
    "FatalFlagError",
    "Flag",
    "FlagError",
    "FlagSet",
    "FlagSyntaxError",
    "HelpRequested",
    "MissingValueError",
    "NDFlagSet",
    "OptionalCell",
    "ParseError",
    "RangeError",
    "UndefinedFlagError",
]
