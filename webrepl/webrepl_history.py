"""
The process-wide, append-only evaluation history.
"""
import threading
from dataclasses import dataclass
from typing import Iterator, Tuple


@dataclass(frozen=True)
class HistoryRecord:
    """One submitted form and what came of it. Every field is text."""
    expr: str
    result: str = ""
    out: str = ""
    err: str = ""
    result_html: str = ""


class HistoryLog:
    """An ordered log of HistoryRecords shared by all request handlers.

    Appends are serialized by a lock, so each one commits against the state
    left by the previous one and no record is lost. Readers get an immutable
    snapshot in append order.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._records: Tuple[HistoryRecord, ...] = ()

    def append(self, record: HistoryRecord) -> Tuple[HistoryRecord, ...]:
        """Add `record` and return the snapshot that includes it."""
        if not isinstance(record, HistoryRecord):
            raise TypeError(f"expected HistoryRecord, got {type(record).__name__}")
        with self._lock:
            self._records = self._records + (record,)
            return self._records

    def current(self) -> Tuple[HistoryRecord, ...]:
        return self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[HistoryRecord]:
        return iter(self._records)


__all__ = [
    "HistoryLog",
    "HistoryRecord",
]
