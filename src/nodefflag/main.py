"""main.py – Command-line entry point for nodefflag.

Loads a flag declaration file (see :mod:`nodefflag.config`), registers the
flags it declares and either parses an argument list against them or prints
their usage text.
"""

import sys
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from nodefflag.cli import cell_state, error_exit, json_print
from nodefflag.cells import DirectCell, OptionalCell
from nodefflag.config import build_flagset, load_spec
from nodefflag.errors import ConfigError, FlagError, HelpRequested
from nodefflag.ndflagset import NDFlagSet

app = typer.Typer(
    help="Try command-line flags declared in a TOML file.",
    rich_markup_mode="rich",
    no_args_is_help=True,
    epilog="""\
[bold]Examples:[/bold]

nodefflag check flags.toml -- -count=3 -verbose    Show which flags were set

nodefflag check flags.toml --json -- -timeout=1h   Machine-readable JSON output

nodefflag usage flags.toml                          Print the usage text

[dim]Put flag tokens after '--' so they are not read as nodefflag options.[/dim]""",
)

SpecArgument: Path = typer.Argument(..., help="TOML file declaring the flags.")


def _load(
    spec_path: Path, *, json_mode: bool = False
) -> tuple[NDFlagSet, dict[str, OptionalCell[Any] | DirectCell[Any]]]:
    try:
        spec = load_spec(spec_path)
        return build_flagset(spec)
    except (FileNotFoundError, ConfigError, FlagError, ValueError) as exc:
        error_exit(str(exc), json_mode=json_mode)


@app.command(context_settings={"allow_extra_args": True, "ignore_unknown_options": True})
def check(
    ctx: typer.Context,
    spec_path: Path = SpecArgument,
    json_output: bool = typer.Option(False, "--json", help="Output results as JSON"),
) -> None:
    """Parse the extra arguments against the declared flags and report each cell."""
    flagset, cells = _load(spec_path, json_mode=json_output)

    try:
        flagset.parse(ctx.args)
    except HelpRequested:
        raise typer.Exit(code=0)
    except (FlagError, ValueError) as exc:
        error_exit(str(exc), json_mode=json_output, code=2)

    seen: set[str] = set()
    flagset.visit(lambda flag: seen.add(flag.name))

    states = {}
    for name, cell in cells.items():
        states[name] = cell_state(flagset.lookup(name), cell, name in seen)

    if json_output:
        json_print({"flags": states, "args": flagset.args})
        return

    tbl = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    tbl.add_column("Flag")
    tbl.add_column("Type", style="dim")
    tbl.add_column("State")
    tbl.add_column("Value")
    tbl.add_column("Example", style="dim")
    for name, state in states.items():
        marker = "[green]set[/]" if state["set"] else "[yellow]unset[/]"
        value = "—" if state["value"] is None else str(state["value"])
        tbl.add_row(
            f"-{name}", f"{state['style']} {state['type']}", marker, escape(value), escape(state["example"])
        )

    console = Console()
    console.print(tbl)
    if flagset.args:
        console.print(f"[dim]remaining args:[/dim] {escape(' '.join(flagset.args))}", highlight=False)


@app.command()
def usage(spec_path: Path = SpecArgument) -> None:
    """Print the usage text of the declared flags to stdout."""
    flagset, _cells = _load(spec_path)
    flagset.set_output(sys.stdout)
    flagset.usage()


def main() -> None:
    app()


if __name__ == "__main__":
    main()
