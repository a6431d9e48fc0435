"""DynamoDB integration tests (DynamoDB Local compatible)."""

from __future__ import annotations

import os
import threading
import uuid

import pytest

from sequencer import Abandoned, Applied, SequenceTable, SequencerConfig, TableStatus
from sequencer.store import make_client

pytestmark = pytest.mark.dynamodb


@pytest.fixture
def live_table():
    if os.getenv("SEQUENCER_DYNAMODB_TEST") != "1":
        pytest.skip("DynamoDB integration tests disabled (set SEQUENCER_DYNAMODB_TEST=1)")

    config = SequencerConfig(
        table_name=f"sequencer-it-{uuid.uuid4().hex[:12]}",
        region=os.getenv("SEQUENCER_REGION", "us-east-1"),
        endpoint_url=os.getenv("SEQUENCER_ENDPOINT_URL", "http://127.0.0.1:8000"),
        activation_timeout_s=60,
    )
    client = make_client(config)
    table = SequenceTable(config, client=client)
    table.create()
    yield table
    client.delete_table(TableName=config.table_name)


def test_create_twice_leaves_table_active(live_table):
    live_table.create()
    assert live_table.status() is TableStatus.ACTIVE


def test_first_write_and_non_regression(live_table):
    assert live_table.set_if_advancing("feed:123", 5) == Applied(5)
    assert live_table.set_if_advancing("feed:123", 3) == Abandoned(5)
    assert live_table.get("feed:123") == 5
    assert live_table.exists("feed:123") is True
    assert live_table.exists("feed:999") is False


def test_concurrent_writers_converge(live_table):
    threads = [
        threading.Thread(target=live_table.set_if_advancing, args=("x", v)) for v in range(1, 11)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert live_table.get("x") == 10


def test_truncate_and_delete(live_table):
    for i in range(30):
        live_table.set_if_advancing(f"id{i}", i)
    live_table.delete_item("id0")
    assert live_table.get("id0") is None
    assert live_table.get("id1") == 1

    assert live_table.truncate() == 29
    assert live_table.get_many([f"id{i}" for i in range(30)]) == {}
