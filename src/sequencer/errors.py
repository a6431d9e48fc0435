"""Structured error types for the sequencer."""

from __future__ import annotations

from typing import Any


class SequencerError(Exception):
    """Base error for all sequencer errors."""


class ConfigurationError(SequencerError, ValueError):
    """Raised when configuration values are invalid."""


class TableActivationTimeout(SequencerError):
    """Raised when a table does not become ACTIVE within the activation timeout."""

    def __init__(self, table_name: str, timeout_s: float) -> None:
        self.table_name = table_name
        self.timeout_s = timeout_s
        super().__init__(f"Table '{table_name}' did not become ACTIVE within {timeout_s:g}s")


class InvalidSequenceValueError(SequencerError, ValueError):
    """Raised when a sequence value is not a non-negative integer."""

    def __init__(self, value: Any, reason: str = "must be a non-negative integer") -> None:
        self.value = value
        super().__init__(f"Invalid sequence value {value!r}: {reason}")


class RetryLimitExceededError(SequencerError):
    """Raised when a conditional write keeps conflicting past max_attempts."""

    def __init__(self, ident: str, attempts: int) -> None:
        self.ident = ident
        self.attempts = attempts
        super().__init__(f"Write for '{ident}' still conflicting after {attempts} attempts")


class StorageBackendError(SequencerError):
    """Raised when the store leaves a batch request unfinished."""

    def __init__(self, operation: str, detail: str) -> None:
        self.operation = operation
        self.detail = detail
        super().__init__(f"Storage backend error during {operation}: {detail}")
