"""Sequence table: lifecycle, conditional-write protocol and maintenance."""

from __future__ import annotations

import dataclasses
import random
import threading
import time
from typing import Any, Callable

from sequencer.config import SequencerConfig
from sequencer.errors import (
    InvalidSequenceValueError,
    RetryLimitExceededError,
    TableActivationTimeout,
)
from sequencer.logging import get_logger
from sequencer.models import (
    VALUE_ATTRIBUTE,
    Abandoned,
    Applied,
    Outcome,
    SequenceRecord,
    TableStatus,
    WriteResult,
)
from sequencer.store import DynamoStore, StoreProtocol, make_client

logger = get_logger(__name__)


def _check_value(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidSequenceValueError(value)
    if value < 0:
        raise InvalidSequenceValueError(value)
    return value


class SequenceTable:
    """Per-identifier monotonic sequence values stored in one DynamoDB table.

    A single lock guards lazy resolution of the store handle, the whole of
    ``create()``, and each individual conditional-write attempt. It is never
    held across a retry sequence, so other threads interleave between attempts.
    """

    def __init__(
        self,
        config: SequencerConfig | None = None,
        *,
        table_name: str | None = None,
        client: Any = None,
        store_factory: Callable[[SequencerConfig], StoreProtocol] | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        config = config or SequencerConfig()
        if table_name is not None:
            config = dataclasses.replace(config, table_name=table_name)
        self._config = config
        self._client = client
        self._store_factory = store_factory
        self._sleep = sleep
        self._clock = clock
        self._lock = threading.Lock()
        self._store: StoreProtocol | None = None

    @property
    def table_name(self) -> str:
        return self._config.table_name

    @property
    def config(self) -> SequencerConfig:
        return self._config

    # --- Handle ---

    def _build_store(self) -> StoreProtocol:
        if self._store_factory is not None:
            return self._store_factory(self._config)
        client = self._client if self._client is not None else make_client(self._config)
        return DynamoStore(self._config.table_name, client)

    def _resolve_locked(self) -> StoreProtocol:
        if self._store is None:
            self._store = self._build_store()
        return self._store

    def _handle(self) -> StoreProtocol:
        store = self._store
        if store is not None:
            return store
        with self._lock:
            return self._resolve_locked()

    # --- Lifecycle ---

    def create(self) -> None:
        """Ensure the table exists and is ACTIVE. Safe to call repeatedly."""
        with self._lock:
            store = self._resolve_locked()
            if not store.table_exists():
                created = store.create_table(self._config.read_units, self._config.write_units)
                logger.info("table_created", table=self.table_name, created=created)
            self._wait_until_active(store)

    def _wait_until_active(self, store: StoreProtocol) -> None:
        timeout = self._config.activation_timeout_s
        deadline = self._clock() + timeout
        while True:
            status = store.describe_status()
            if status is TableStatus.ACTIVE:
                logger.info("table_active", table=self.table_name)
                return
            if self._clock() >= deadline:
                raise TableActivationTimeout(self.table_name, timeout)
            logger.debug("table_waiting", table=self.table_name, status=status.value)
            self._sleep(self._config.poll_interval_s)

    def status(self) -> TableStatus:
        return self._handle().describe_status()

    # --- Sequence protocol ---

    def exists(self, ident: str) -> bool:
        return self._handle().count(ident) > 0

    def get(self, ident: str) -> int | None:
        """Strongly consistent read of the stored value, or None if absent."""
        item = self._handle().get_consistent(ident)
        if item is None:
            return None
        return int(item[VALUE_ATTRIBUTE])

    def record(self, ident: str) -> SequenceRecord | None:
        value = self.get(ident)
        return None if value is None else SequenceRecord(key=ident, value=value)

    def get_many(self, idents: list[str]) -> dict[str, int]:
        """Consistent batch read; identifiers without a record are omitted."""
        rows = self._handle().batch_get([VALUE_ATTRIBUTE], idents, consistent=True)
        return {str(row["key"]): int(row[VALUE_ATTRIBUTE]) for row in rows}

    def set_if_advancing(self, ident: str, value: int, expected: int | None = None) -> Outcome:
        """Set ``ident`` to ``value`` unless the stored value is already at least as high.

        ``expected`` is the caller's view of the current value (None meaning no
        record yet). On conflict the current value is re-read: if it already
        reaches ``value`` the write is abandoned, otherwise it is retried
        against the fresh value.
        """
        _check_value(value)
        if expected is not None:
            _check_value(expected)
        store = self._handle()
        max_attempts = self._config.max_attempts

        attempt = 0
        while True:
            attempt += 1
            with self._lock:
                result = store.put_conditional(ident, value, expected)

            if result is WriteResult.APPLIED:
                logger.info("sequence_set", ident=ident, value=value, attempt=attempt)
                return Applied(value)

            logger.warning(
                "sequence_conflict", ident=ident, value=value, expected=expected, attempt=attempt
            )
            current = self.get(ident)
            if current is not None and current >= value:
                logger.warning("sequence_outdated", ident=ident, value=value, current=current)
                return Abandoned(current)

            if max_attempts is not None and attempt >= max_attempts:
                raise RetryLimitExceededError(ident, attempt)

            expected = current
            logger.info("sequence_retry", ident=ident, value=value, expected=expected)
            self._backoff(attempt)

    def _backoff(self, attempt: int) -> None:
        cap = min(self._config.backoff_max_s, self._config.backoff_base_s * 2 ** (attempt - 1))
        if cap > 0:
            self._sleep(random.uniform(0.0, cap))

    # --- Maintenance ---

    def delete_item(self, ident: str) -> None:
        self._handle().delete_item(ident)

    def truncate(self) -> int:
        """Delete every record. Not isolated from concurrent writers."""
        store = self._handle()
        keys = list(store.scan_all(store.key_attributes()))
        deleted = store.batch_delete(keys, self._config.batch_delete_size)
        logger.info("table_truncated", table=self.table_name, deleted=deleted)
        return deleted
