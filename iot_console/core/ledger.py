"""
Feedback ledger - bounded, newest-first log of device responses.

Eviction follows insertion order, not timestamps: once the ledger holds more
than its capacity, the entries appended longest ago are dropped.
"""

import time
from datetime import datetime, timezone
from typing import List, Optional

from util.logging import logger
from .schema import FeedbackEntry, MessageSchema, OutcomeKind


def create_feedback_entry(kind: OutcomeKind, message: str, details: Optional[str] = None,
                          schema: Optional[MessageSchema] = None,
                          now: Optional[datetime] = None) -> FeedbackEntry:
    """Create an immutable feedback entry with a time-based id."""
    return FeedbackEntry(
        id=str(time.time_ns()),
        timestamp=now or datetime.now(timezone.utc),
        kind=OutcomeKind(kind),
        message=message,
        details=details,
        schema_id=schema.id if schema else None,
        schema_name=schema.name if schema else None,
    )


def error_entry(message: str, details: Optional[str] = None, schema: Optional[MessageSchema] = None) -> FeedbackEntry:
    return create_feedback_entry(OutcomeKind.ERROR, message, details, schema)


def success_entry(message: str, details: Optional[str] = None, schema: Optional[MessageSchema] = None) -> FeedbackEntry:
    return create_feedback_entry(OutcomeKind.SUCCESS, message, details, schema)


def info_entry(message: str, details: Optional[str] = None, schema: Optional[MessageSchema] = None) -> FeedbackEntry:
    return create_feedback_entry(OutcomeKind.INFO, message, details, schema)


class FeedbackLedger:
    """Append-only, capacity-bounded feedback log owned by one session."""

    def __init__(self, capacity: int = 10):
        if capacity < 1:
            raise ValueError("Ledger capacity must be >= 1")
        self._capacity = capacity
        self._entries: List[FeedbackEntry] = []

    @property
    def capacity(self) -> int:
        return self._capacity

    def append(self, entry: FeedbackEntry) -> None:
        self._entries.insert(0, entry)
        if len(self._entries) > self._capacity:
            evicted = self._entries[self._capacity:]
            del self._entries[self._capacity:]
            logger.log_ledger_eviction([e.id for e in evicted], self._capacity)

    def all(self) -> List[FeedbackEntry]:
        """Entries newest first. Returns a copy."""
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
