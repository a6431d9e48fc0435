"""Message sequencer: in-order processing of messages for a single identifier."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Callable, TypeVar

from sequencer.errors import InvalidSequenceValueError
from sequencer.logging import get_logger
from sequencer.models import Outcome
from sequencer.table import SequenceTable

logger = get_logger(__name__)

T = TypeVar("T")


def resolve_path(data: dict[str, Any], dotted_path: str) -> Any:
    """Resolve a dotted path against a nested dict, returning None on missing keys."""
    current: Any = data
    for segment in dotted_path.split("."):
        if not isinstance(current, dict):
            return None
        current = current.get(segment)
        if current is None:
            return None
    return current


class Sequencer:
    """Tracks the last seen sequence id for one identifier.

    Messages are dicts; ``path`` is the dotted location of the sequence id
    inside each message (e.g. ``"sequence_id"`` or ``"meta.seq"``).
    """

    def __init__(self, table: SequenceTable, ident: str, path: str = "sequence_id") -> None:
        self.table = table
        self.ident = ident
        self.path = path

    def sequence_id_from(self, message: dict[str, Any]) -> int:
        raw = resolve_path(message, self.path)
        if isinstance(raw, bool):
            raise InvalidSequenceValueError(raw, f"no integer at '{self.path}'")
        try:
            value = int(raw)
            # Fractional ids are rejected, not truncated.
            if isinstance(raw, (float, Decimal)) and value != raw:
                raise ValueError(raw)
        except (TypeError, ValueError, OverflowError) as e:
            raise InvalidSequenceValueError(raw, f"no integer at '{self.path}'") from e
        if value < 0:
            raise InvalidSequenceValueError(raw)
        return value

    def get_last_seen(self) -> int | None:
        return self.table.get(self.ident)

    def set_last_seen(self, message: dict[str, Any], last_seen_check: int | None = None) -> Outcome:
        value = self.sequence_id_from(message)
        return self.table.set_if_advancing(self.ident, value, last_seen_check)

    def is_sequential(self, message: dict[str, Any]) -> bool:
        return self._is_after(message, self.get_last_seen())

    def _is_after(self, message: dict[str, Any], last_seen: int | None) -> bool:
        return last_seen is None or self.sequence_id_from(message) > last_seen

    def validate(self, message: dict[str, Any], handler: Callable[[dict[str, Any]], T]) -> T | None:
        """Run ``handler`` only for messages newer than the last seen one.

        After the handler returns, the stored sequence is advanced to the
        message's id. Out-of-sequence messages are logged and skipped.
        """
        last_seen = self.get_last_seen()
        if not self._is_after(message, last_seen):
            logger.warning(
                "message_out_of_sequence",
                ident=self.ident,
                sequence_id=self.sequence_id_from(message),
                last_seen=last_seen,
            )
            return None

        result = handler(message)
        self.set_last_seen(message, last_seen)
        return result

    def exists(self) -> bool:
        return self.table.exists(self.ident)

    def delete(self) -> None:
        self.table.delete_item(self.ident)

    def truncate(self) -> int:
        return self.table.truncate()
