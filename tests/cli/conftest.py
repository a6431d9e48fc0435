"""Shared fixtures for CLI tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from typer.testing import CliRunner

from sequencer.cli import app, state
from tests.fakes import FakeDynamoClient

if TYPE_CHECKING:
    from click.testing import Result


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_client(monkeypatch):
    """Route CLI commands to an in-memory DynamoDB client."""
    client = FakeDynamoClient(exists=True, table_name="feeds")
    monkeypatch.setattr(state, "client", client)
    return client


def invoke(runner: CliRunner, args: list[str], table: str | None = "feeds") -> "Result":
    """Invoke CLI with the table selected and logging kept quiet."""
    prefix = ["--log-level", "ERROR"]
    if table:
        prefix += ["--table", table]
    return runner.invoke(app, prefix + args, catch_exceptions=False)
