"""CLI helpers for constructing the sequence table from CLI state."""

from __future__ import annotations

import typer
from botocore.exceptions import BotoCoreError, ClientError

from sequencer.cli import _exitcodes as ec
from sequencer.cli._output import print_error
from sequencer.config import SequencerConfig
from sequencer.errors import ConfigurationError, SequencerError
from sequencer.table import SequenceTable

STORE_ERRORS = (ClientError, BotoCoreError, SequencerError)


def open_table() -> SequenceTable:
    """Open the sequence table selected by global CLI options and environment."""
    from sequencer.cli import state

    try:
        config = SequencerConfig.from_env(table_name=state.table)
    except ConfigurationError as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)
    return SequenceTable(config, client=state.client)


def fail(e: Exception) -> typer.Exit:
    """Report a store error and build the matching exit."""
    print_error(str(e))
    return typer.Exit(ec.BACKEND_ERROR)
