"""seq CLI: operator console for sequence tables."""

from __future__ import annotations

from typing import Any, Optional

import typer

from sequencer.cli import commands
from sequencer.logging import setup_logging

app = typer.Typer(
    name="seq",
    help="seq: inspect and manage per-identifier sequence values in DynamoDB.",
    no_args_is_help=True,
)


class _State:
    """Global CLI state shared across subcommands."""

    table: str | None = None
    json_output: bool = False
    # A pre-built DynamoDB client; None builds one from the environment.
    client: Any = None


state = _State()


def _version_callback(value: bool) -> None:
    if value:
        try:
            from importlib.metadata import version

            v = version("sequencer")
        except Exception:
            v = "unknown"
        print(f"seq {v}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    table: Optional[str] = typer.Option(
        None,
        "--table",
        "-t",
        envvar="SEQUENCER_TABLE_NAME",
        help="DynamoDB table name (default: sequencer)",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output"),
    log_level: str = typer.Option(
        "WARNING", "--log-level", envvar="SEQUENCER_LOG_LEVEL", help="Minimum log level"
    ),
    log_format: str = typer.Option(
        "console", "--log-format", help="Log format: console or json"
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version", is_eager=True, callback=_version_callback
    ),
) -> None:
    """Global options for all seq commands."""
    if log_format not in {"console", "json"}:
        raise typer.BadParameter("--log-format must be 'console' or 'json'")
    setup_logging(level=log_level, format=log_format)

    state.table = table
    state.json_output = json_output
    if ctx.invoked_subcommand is None and not version:
        print(ctx.get_help())
        raise typer.Exit()


app.command(name="create")(commands.create_cmd)
app.command(name="exists")(commands.exists_cmd)
app.command(name="get")(commands.get_cmd)
app.command(name="set")(commands.set_cmd)
app.command(name="delete")(commands.delete_cmd)
app.command(name="truncate")(commands.truncate_cmd)


def main() -> None:
    """Entry point for the seq CLI."""
    app()
