"""Sequencer: durable per-identifier monotonic sequence values on DynamoDB."""

__version__ = "0.1.0"

from sequencer.config import SequencerConfig
from sequencer.errors import (
    ConfigurationError,
    InvalidSequenceValueError,
    RetryLimitExceededError,
    SequencerError,
    StorageBackendError,
    TableActivationTimeout,
)
from sequencer.models import (
    Abandoned,
    Applied,
    Outcome,
    SequenceRecord,
    TableStatus,
    WriteResult,
)
from sequencer.sequencer import Sequencer
from sequencer.store import DynamoStore, StoreProtocol
from sequencer.table import SequenceTable

__all__ = [
    "__version__",
    "SequencerConfig",
    "SequencerError",
    "ConfigurationError",
    "InvalidSequenceValueError",
    "RetryLimitExceededError",
    "StorageBackendError",
    "TableActivationTimeout",
    "Abandoned",
    "Applied",
    "Outcome",
    "SequenceRecord",
    "TableStatus",
    "WriteResult",
    "DynamoStore",
    "StoreProtocol",
    "SequenceTable",
    "Sequencer",
]
