"""Shared test fixtures for sequencer tests."""

from __future__ import annotations

import pytest

from sequencer.config import SequencerConfig
from sequencer.logging import reset_logging
from sequencer.table import SequenceTable
from tests.fakes import FakeDynamoClient


class FakeClock:
    """Monotonic clock advanced only by the injected sleep."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    reset_logging()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def client():
    """A fake DynamoDB client whose table already exists and is ACTIVE."""
    return FakeDynamoClient(exists=True)


@pytest.fixture
def config():
    return SequencerConfig(table_name="sequencer", backoff_base_s=0.0, backoff_max_s=0.0)


@pytest.fixture
def table(client, config, clock):
    return SequenceTable(config, client=client, sleep=clock.sleep, clock=clock)
