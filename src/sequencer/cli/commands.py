"""seq commands: create, exists, get, set, delete, truncate."""

from __future__ import annotations

from typing import Optional

import typer

from sequencer.cli import _exitcodes as ec
from sequencer.cli._output import print_error, print_object
from sequencer.cli._table import STORE_ERRORS, fail, open_table
from sequencer.errors import InvalidSequenceValueError, TableActivationTimeout
from sequencer.models import Applied


def create_cmd() -> None:
    """Create the table if needed and wait until it is ACTIVE."""
    from sequencer.cli import state

    table = open_table()
    try:
        table.create()
    except TableActivationTimeout as e:
        print_error(str(e))
        raise typer.Exit(ec.TIMEOUT)
    except STORE_ERRORS as e:
        raise fail(e)
    print_object({"table": table.table_name, "status": "ACTIVE"}, json_mode=state.json_output)


def exists_cmd(ident: str = typer.Argument(..., help="Sequence identifier")) -> None:
    """Report whether a record exists for IDENT."""
    from sequencer.cli import state

    try:
        found = open_table().exists(ident)
    except STORE_ERRORS as e:
        raise fail(e)
    print_object({"key": ident, "exists": found}, json_mode=state.json_output)


def get_cmd(idents: list[str] = typer.Argument(..., help="One or more identifiers")) -> None:
    """Show the stored sequence value for each IDENT."""
    from sequencer.cli import state

    table = open_table()
    try:
        if len(idents) == 1:
            value = table.get(idents[0])
            values = {} if value is None else {idents[0]: value}
        else:
            values = table.get_many(idents)
    except STORE_ERRORS as e:
        raise fail(e)

    missing = [i for i in idents if i not in values]
    if len(idents) == 1:
        if missing:
            print_error(f"No sequence for '{idents[0]}'")
            raise typer.Exit(ec.NOT_FOUND)
        print_object({"key": idents[0], "value": values[idents[0]]}, json_mode=state.json_output)
        return

    print_object({i: values.get(i) for i in idents}, json_mode=state.json_output)
    if missing:
        raise typer.Exit(ec.NOT_FOUND)


def set_cmd(
    ident: str = typer.Argument(..., help="Sequence identifier"),
    value: int = typer.Argument(..., help="Desired sequence value"),
    expected: Optional[int] = typer.Option(
        None, "--expected", help="Value the caller last saw (omit for a first write)"
    ),
) -> None:
    """Advance IDENT to VALUE unless the stored value is already at least VALUE."""
    from sequencer.cli import state

    try:
        outcome = open_table().set_if_advancing(ident, value, expected)
    except InvalidSequenceValueError as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)
    except STORE_ERRORS as e:
        raise fail(e)

    stored = outcome.value if isinstance(outcome, Applied) else outcome.current
    data = {"key": ident, "requested": value, "applied": outcome.applied, "value": stored}
    print_object(data, json_mode=state.json_output)


def delete_cmd(ident: str = typer.Argument(..., help="Sequence identifier")) -> None:
    """Delete the record for IDENT."""
    from sequencer.cli import state

    try:
        open_table().delete_item(ident)
    except STORE_ERRORS as e:
        raise fail(e)
    print_object({"key": ident, "deleted": True}, json_mode=state.json_output)


def truncate_cmd(
    yes: bool = typer.Option(False, "--yes", help="Confirm deleting every record"),
) -> None:
    """Delete every record in the table."""
    from sequencer.cli import state

    if not yes:
        print_error("truncate deletes every record; pass --yes to confirm")
        raise typer.Exit(ec.USAGE_ERROR)
    table = open_table()
    try:
        deleted = table.truncate()
    except STORE_ERRORS as e:
        raise fail(e)
    print_object({"table": table.table_name, "deleted": deleted}, json_mode=state.json_output)
