"""Value types shared by the store adapter and the sequence table."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

KEY_ATTRIBUTE = "key"
VALUE_ATTRIBUTE = "value"


class TableStatus(str, Enum):
    """Lifecycle status of the backing table as reported by DynamoDB."""

    ABSENT = "ABSENT"
    CREATING = "CREATING"
    ACTIVE = "ACTIVE"
    UPDATING = "UPDATING"
    DELETING = "DELETING"
    INACCESSIBLE_ENCRYPTION_CREDENTIALS = "INACCESSIBLE_ENCRYPTION_CREDENTIALS"
    ARCHIVING = "ARCHIVING"
    ARCHIVED = "ARCHIVED"


class WriteResult(str, Enum):
    """Result of a single conditional write attempt."""

    APPLIED = "applied"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class SequenceRecord:
    key: str
    value: int


@dataclass(frozen=True)
class Applied:
    """The write was accepted; the record now holds ``value``."""

    value: int

    @property
    def applied(self) -> bool:
        return True


@dataclass(frozen=True)
class Abandoned:
    """The stored value was already at least as advanced as requested."""

    current: int

    @property
    def applied(self) -> bool:
        return False


Outcome = Union[Applied, Abandoned]
