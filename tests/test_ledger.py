"""
Feedback ledger tests - newest-first ordering and capacity bound.
"""

from datetime import datetime, timedelta, timezone

import pytest

from iot_console.core.ledger import (
    FeedbackLedger,
    create_feedback_entry,
    error_entry,
    info_entry,
    success_entry,
)
from iot_console.core.registry import get_registry
from iot_console.core.schema import OutcomeKind


def entries(count):
    return [create_feedback_entry(OutcomeKind.INFO, f"message {i}") for i in range(count)]


class TestFeedbackEntries:
    """Entry factories."""

    def test_entry_carries_provenance(self):
        """Entries record the schema they came from."""
        schema = get_registry().get_by_id("sensor-config")
        entry = create_feedback_entry("success", "Configuration applied successfully", schema=schema)
        assert entry.kind == OutcomeKind.SUCCESS
        assert entry.schema_id == "sensor-config"
        assert entry.schema_name == "Sensor Configuration"
        assert entry.details is None

    def test_helpers_set_kind(self):
        """Kind helpers build entries of their kind."""
        assert error_entry("x").kind == OutcomeKind.ERROR
        assert success_entry("x").kind == OutcomeKind.SUCCESS
        assert info_entry("x", "more").details == "more"

    def test_entries_are_immutable(self):
        """Entries cannot be modified after creation."""
        entry = info_entry("x")
        with pytest.raises(AttributeError):
            entry.message = "changed"

    def test_to_dict(self):
        """Entries serialize with the display keys."""
        now = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        data = create_feedback_entry(OutcomeKind.ERROR, "Failed", "why", now=now).to_dict()
        assert data["type"] == "error"
        assert data["timestamp"] == "2024-01-02T03:04:05+00:00"
        assert data["details"] == "why"
        assert data["schema_id"] is None

    def test_unknown_kind_rejected(self):
        """Unknown outcome kinds are rejected."""
        with pytest.raises(ValueError):
            create_feedback_entry("warning", "nope")


class TestFeedbackLedger:
    """Bounding and ordering."""

    def test_newest_first(self):
        """The newest entry is listed first."""
        ledger = FeedbackLedger(capacity=5)
        first, second, third = entries(3)
        for entry in (first, second, third):
            ledger.append(entry)
        assert ledger.all() == [third, second, first]

    @pytest.mark.parametrize("capacity, appends", [(10, 0), (10, 3), (10, 10), (10, 11), (10, 25), (1, 4), (3, 3)])
    def test_bound_keeps_most_recent(self, capacity, appends):
        """The ledger never grows past capacity."""
        ledger = FeedbackLedger(capacity=capacity)
        appended = entries(appends)
        for entry in appended:
            ledger.append(entry)

        assert len(ledger.all()) == min(capacity, appends)
        assert ledger.all() == list(reversed(appended))[:capacity]

    def test_eviction_ignores_timestamps(self):
        """Eviction follows insertion order, not timestamps."""
        ledger = FeedbackLedger(capacity=2)
        now = datetime.now(timezone.utc)
        # Appended in an order that disagrees with the clock
        future = create_feedback_entry(OutcomeKind.INFO, "future", now=now + timedelta(hours=1))
        past = create_feedback_entry(OutcomeKind.INFO, "past", now=now - timedelta(hours=1))
        latest = create_feedback_entry(OutcomeKind.INFO, "latest", now=now)
        for entry in (future, past, latest):
            ledger.append(entry)
        assert ledger.all() == [latest, past]

    def test_all_returns_copy(self):
        """Mutating the returned list leaves the ledger intact."""
        ledger = FeedbackLedger()
        ledger.append(info_entry("x"))
        ledger.all().clear()
        assert len(ledger) == 1

    def test_clear(self):
        """Clearing empties the ledger."""
        ledger = FeedbackLedger()
        for entry in entries(4):
            ledger.append(entry)
        ledger.clear()
        assert ledger.all() == []

    def test_default_capacity(self):
        """Capacity defaults to ten entries."""
        assert FeedbackLedger().capacity == 10

    def test_invalid_capacity(self):
        """Capacities below one are rejected."""
        with pytest.raises(ValueError):
            FeedbackLedger(capacity=0)
