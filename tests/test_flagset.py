"""Tests for the flag registry: tokenizing, error policies and usage."""

import io

import pytest

from nodefflag.cells import DirectCell, OptionalCell
from nodefflag.errors import (
    DuplicateFlagError,
    FatalFlagError,
    FlagSyntaxError,
    HelpRequested,
    MissingValueError,
    ParseError,
    UndefinedFlagError,
)
from nodefflag.flagset import ErrorHandling, Flag, FlagSet, format_flag_heading, unquote_usage
from nodefflag.values import DirectInt, DirectString, OptionalBool, OptionalInt, OptionalString


class _Plain:
    """A value implementing only the minimal protocol."""

    def __init__(self) -> None:
        self.text = ""

    def __str__(self) -> str:
        return self.text

    def set(self, text: str) -> None:
        self.text = text

    def get(self) -> str:
        return self.text


def _make(
    error_handling: ErrorHandling = ErrorHandling.CONTINUE,
) -> tuple[FlagSet, io.StringIO, OptionalCell[int], OptionalCell[bool], OptionalCell[str]]:
    fs = FlagSet("app", error_handling)
    out = io.StringIO()
    fs.set_output(out)
    n: OptionalCell[int] = OptionalCell()
    v: OptionalCell[bool] = OptionalCell()
    s: OptionalCell[str] = OptionalCell()
    fs.var(OptionalInt(n, "0"), "n", "a number")
    fs.var(OptionalBool(v, "false"), "v", "verbose")
    fs.var(OptionalString(s, ""), "s", "a string")
    return fs, out, n, v, s


# ---------------------------------------------------------------------------
# Token grammar
# ---------------------------------------------------------------------------


class TestGrammar:
    def test_equals_form(self) -> None:
        fs, _, n, _, s = _make()
        fs.parse(["-n=3", "-s=hello"])
        assert n.value == 3
        assert s.value == "hello"

    def test_separate_value_token(self) -> None:
        fs, _, n, _, _ = _make()
        fs.parse(["-n", "5"])
        assert n.value == 5
        assert fs.args == []

    def test_double_dash_prefix(self) -> None:
        fs, _, n, _, _ = _make()
        fs.parse(["--n=7"])
        assert n.value == 7

    def test_value_may_contain_equals(self) -> None:
        fs, _, _, _, s = _make()
        fs.parse(["-s=a=b"])
        assert s.value == "a=b"

    def test_empty_value(self) -> None:
        fs, _, _, _, s = _make()
        fs.parse(["-s="])
        assert s.value == ""

    def test_bare_bool_is_true(self) -> None:
        fs, _, _, v, _ = _make()
        fs.parse(["-v"])
        assert v.value is True

    def test_bool_does_not_consume_next_token(self) -> None:
        fs, _, _, v, _ = _make()
        fs.parse(["-v", "false"])
        assert v.value is True
        assert fs.args == ["false"]

    def test_bool_explicit_false(self) -> None:
        fs, _, _, v, _ = _make()
        fs.parse(["-v=false"])
        assert v.value is False

    def test_stops_at_first_non_flag(self) -> None:
        fs, _, n, v, _ = _make()
        fs.parse(["-n=1", "file.txt", "-v"])
        assert n.value == 1
        assert v.value is None
        assert fs.args == ["file.txt", "-v"]

    def test_lone_dash_is_an_argument(self) -> None:
        fs, _, _, _, _ = _make()
        fs.parse(["-", "-v"])
        assert fs.args == ["-", "-v"]

    def test_double_dash_terminates(self) -> None:
        fs, _, _, v, _ = _make()
        fs.parse(["--", "-v"])
        assert v.value is None
        assert fs.args == ["-v"]

    def test_flag_can_repeat_last_wins(self) -> None:
        fs, _, n, _, _ = _make()
        fs.parse(["-n=1", "-n=2"])
        assert n.value == 2

    def test_accepts_any_iterable(self) -> None:
        fs, _, n, _, _ = _make()
        fs.parse(iter(["-n=4", "rest"]))
        assert n.value == 4
        assert fs.args == ["rest"]


# ---------------------------------------------------------------------------
# Errors under the CONTINUE policy
# ---------------------------------------------------------------------------


class TestErrors:
    def test_invalid_value_propagates_parse_error(self) -> None:
        fs, out, n, _, _ = _make()
        with pytest.raises(ParseError) as exc_info:
            fs.parse(["-n=abc"])
        assert exc_info.value.flag == "n"
        assert n.value is None
        text = out.getvalue()
        assert text.startswith('invalid value "abc" for flag -n: parsing "abc": invalid syntax\n')
        assert "Usage of app:" in text

    def test_invalid_boolean_value(self) -> None:
        fs, out, _, v, _ = _make()
        with pytest.raises(ParseError):
            fs.parse(["-v=maybe"])
        assert v.value is None
        assert out.getvalue().startswith('invalid boolean value "maybe" for -v: ')

    def test_missing_value(self) -> None:
        fs, out, _, _, _ = _make()
        with pytest.raises(MissingValueError):
            fs.parse(["-n"])
        assert out.getvalue().startswith("flag needs an argument: -n\n")

    def test_undefined_flag(self) -> None:
        fs, out, _, _, _ = _make()
        with pytest.raises(UndefinedFlagError):
            fs.parse(["-x=1"])
        assert out.getvalue().startswith("flag provided but not defined: -x\n")

    @pytest.mark.parametrize("token", ["---x", "-=x", "--=x"])
    def test_bad_syntax(self, token: str) -> None:
        fs, out, _, _, _ = _make()
        with pytest.raises(FlagSyntaxError):
            fs.parse([token])
        assert out.getvalue().startswith(f"bad flag syntax: {token}\n")

    @pytest.mark.parametrize("token", ["-h", "-help", "--help"])
    def test_help_requested(self, token: str) -> None:
        fs, out, _, _, _ = _make()
        with pytest.raises(HelpRequested):
            fs.parse([token])
        assert out.getvalue().startswith("Usage of app:\n")

    def test_registered_help_flag_wins(self) -> None:
        fs, _, _, _, _ = _make()
        cell: OptionalCell[bool] = OptionalCell()
        fs.var(OptionalBool(cell, "false"), "help", "show help")
        fs.parse(["-help"])
        assert cell.value is True

    def test_error_after_earlier_flags_keeps_them(self) -> None:
        fs, _, n, _, _ = _make()
        with pytest.raises(ParseError):
            fs.parse(["-n=1", "-n=bad"])
        assert n.value == 1

    def test_foreign_value_errors_are_wrapped_in_message(self) -> None:
        class Strict(_Plain):
            def set(self, text: str) -> None:
                raise ValueError("nope")

        fs = FlagSet("app")
        out = io.StringIO()
        fs.set_output(out)
        fs.var(Strict(), "x", "")
        with pytest.raises(ValueError, match="nope"):
            fs.parse(["-x=1"])
        assert out.getvalue().startswith('invalid value "1" for flag -x: nope\n')


# ---------------------------------------------------------------------------
# Error policies
# ---------------------------------------------------------------------------


class TestPolicies:
    def test_exit_on_error_uses_status_2(self) -> None:
        fs, _, _, _, _ = _make(ErrorHandling.EXIT)
        with pytest.raises(SystemExit) as exc_info:
            fs.parse(["-n=x"])
        assert exc_info.value.code == 2

    def test_exit_on_help_uses_status_0(self) -> None:
        fs, _, _, _, _ = _make(ErrorHandling.EXIT)
        with pytest.raises(SystemExit) as exc_info:
            fs.parse(["-h"])
        assert exc_info.value.code == 0

    def test_panic_raises_fatal_error(self) -> None:
        fs, _, _, _, _ = _make(ErrorHandling.PANIC)
        with pytest.raises(FatalFlagError) as exc_info:
            fs.parse(["-undefined"])
        assert isinstance(exc_info.value.__cause__, UndefinedFlagError)


# ---------------------------------------------------------------------------
# Registration and inspection
# ---------------------------------------------------------------------------


class TestRegistry:
    def test_duplicate_name(self) -> None:
        fs, out, _, _, _ = _make()
        with pytest.raises(DuplicateFlagError) as exc_info:
            fs.var(OptionalInt(OptionalCell(), "0"), "n", "again")
        assert str(exc_info.value) == "app flag redefined: n"
        assert out.getvalue() == "app flag redefined: n\n"

    def test_duplicate_name_unnamed_set(self) -> None:
        fs = FlagSet()
        fs.set_output(io.StringIO())
        fs.var(_Plain(), "x", "")
        with pytest.raises(DuplicateFlagError, match="^flag redefined: x$"):
            fs.var(_Plain(), "x", "")

    @pytest.mark.parametrize("name", ["-x", "a=b"])
    def test_invalid_names(self, name: str) -> None:
        with pytest.raises(ValueError):
            FlagSet().var(_Plain(), name, "")

    def test_lookup(self) -> None:
        fs, _, _, _, _ = _make()
        flag = fs.lookup("n")
        assert flag is not None
        assert flag.name == "n"
        assert flag.usage == "a number"
        assert flag.def_value == "0"
        assert fs.lookup("missing") is None

    def test_visit_all_sorted_and_visit_only_set(self) -> None:
        fs, _, _, _, _ = _make()
        fs.parse(["-v", "-n=2"])
        every: list[str] = []
        seen: list[str] = []
        fs.visit_all(lambda f: every.append(f.name))
        fs.visit(lambda f: seen.append(f.name))
        assert every == ["n", "s", "v"]
        assert seen == ["n", "v"]
        assert fs.nflag() == 2

    def test_programmatic_set(self) -> None:
        fs, _, n, _, _ = _make()
        fs.set("n", "11")
        assert n.value == 11
        assert fs.nflag() == 1
        with pytest.raises(UndefinedFlagError):
            fs.set("zzz", "1")

    def test_remaining_args(self) -> None:
        fs, _, _, _, _ = _make()
        assert not fs.parsed
        fs.parse(["-v", "a", "b"])
        assert fs.parsed
        assert fs.narg() == 2
        assert fs.arg(0) == "a"
        assert fs.arg(1) == "b"
        assert fs.arg(2) == ""
        assert fs.arg(-1) == ""

    def test_output_defaults_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        fs, _, _, _, _ = _make()
        fs.set_output(None)
        fs.usage()
        captured = capsys.readouterr()
        assert captured.err.startswith("Usage of app:\n")
        assert captured.out == ""


# ---------------------------------------------------------------------------
# Usage text
# ---------------------------------------------------------------------------


class TestUsageText:
    def test_unquote_backquoted_name(self) -> None:
        flag = Flag("f", "read `file` from disk", _Plain(), "")
        assert unquote_usage(flag) == ("file", "read file from disk")

    def test_unquote_falls_back_to_type_hint(self) -> None:
        flag = Flag("n", "a number", OptionalInt(OptionalCell(), "0"), "0")
        assert unquote_usage(flag) == ("int", "a number")

    def test_unquote_bool_has_no_name(self) -> None:
        flag = Flag("v", "verbose", OptionalBool(OptionalCell(), "false"), "false")
        assert unquote_usage(flag) == ("", "verbose")

    def test_unquote_unknown_value(self) -> None:
        flag = Flag("x", "thing", _Plain(), "")
        assert unquote_usage(flag) == ("value", "thing")

    def test_unbalanced_backquote_is_left_alone(self) -> None:
        flag = Flag("x", "it`s odd", _Plain(), "")
        assert unquote_usage(flag) == ("value", "it`s odd")

    def test_heading_short_bool_on_one_line(self) -> None:
        flag = Flag("v", "verbose", OptionalBool(OptionalCell(), "false"), "false")
        assert format_flag_heading(flag) == "  -v\tverbose"

    def test_heading_long_name_wraps(self) -> None:
        flag = Flag("count", "how many", OptionalInt(OptionalCell(), "0"), "0")
        assert format_flag_heading(flag) == "  -count int\n    \thow many"

    def test_multiline_usage_is_indented(self) -> None:
        flag = Flag("count", "first\nsecond", OptionalInt(OptionalCell(), "0"), "0")
        assert format_flag_heading(flag) == "  -count int\n    \tfirst\n    \tsecond"

    def test_default_usage_shows_non_zero_defaults(self) -> None:
        fs = FlagSet("tool")
        out = io.StringIO()
        fs.set_output(out)
        fs.var(DirectInt(DirectCell(5), "5"), "level", "compression level")
        fs.var(DirectInt(DirectCell(0), "0"), "retries", "retry count")
        fs.var(DirectString(DirectCell("x"), "x y"), "tag", "a tag")
        fs.usage()
        assert out.getvalue() == (
            "Usage of tool:\n"
            "  -level int\n    \tcompression level (default 5)\n"
            "  -retries int\n    \tretry count\n"
            '  -tag string\n    \ta tag (default "x y")\n'
        )

    def test_unnamed_header(self) -> None:
        fs = FlagSet()
        out = io.StringIO()
        fs.set_output(out)
        fs.usage()
        assert out.getvalue() == "Usage:\n"
