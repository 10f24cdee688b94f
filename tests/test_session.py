"""
Configuration session tests - inbound operations, restored state, value-map store.
"""

import asyncio
import json

import pytest

from iot_console.core.errors import NoSchemaSelectedError, UnknownSchemaError
from iot_console.core.ledger import FeedbackLedger
from iot_console.core.orchestrator import SETTLED, SubmissionState
from iot_console.core.persistence import ValueMapStore
from iot_console.core.schema import OutcomeKind
from iot_console.core.session import ConfigurationSession
from iot_console.device.simulator import ResponseSimulator


async def no_sleep(seconds):
    return None


@pytest.fixture
def simulator():
    return ResponseSimulator(min_delay_ms=0, max_delay_ms=0, random_source=lambda: 0.0, sleep=no_sleep)


@pytest.fixture
def session(simulator):
    return ConfigurationSession(channel=simulator)


@pytest.fixture
def store(tmp_path):
    return ValueMapStore(path=str(tmp_path / "state.json"), storage_key="test-key")


class TestSessionOperations:
    """on_schema_select / on_field_change / on_submit."""

    def test_nothing_selected_initially(self, session):
        """A fresh session has no selection and no values."""
        assert session.selected_schema is None
        assert session.values == {}

    def test_select_seeds_defaults(self, session):
        """Selecting a type seeds its defaults."""
        schema = session.on_schema_select("power")
        assert schema.id == "power"
        assert session.values == {
            "mode": "Balanced",
            "sleepInterval": 5,
            "wakeOnMotion": False,
            "batteryThreshold": 20,
        }

    def test_switching_schema_replaces_values(self, session):
        """Switching types discards the previous values."""
        session.on_schema_select("sensor-config")
        session.on_field_change("sensorId", "TEMP_07")
        session.on_schema_select("power")
        session.on_schema_select("sensor-config")
        assert "sensorId" not in session.values

    def test_select_unknown_schema(self, session):
        """Selecting an unknown type raises."""
        with pytest.raises(UnknownSchemaError):
            session.on_schema_select("toaster")

    def test_field_change_requires_selection(self, session):
        """Editing without a selection raises."""
        with pytest.raises(NoSchemaSelectedError):
            session.on_field_change("sensorId", "x")

    def test_submit_requires_selection(self, session):
        """Submitting without a selection raises."""
        with pytest.raises(NoSchemaSelectedError):
            asyncio.run(session.on_submit())

    def test_values_returns_copy(self, session):
        """The values property is a copy."""
        session.on_schema_select("power")
        session.values["mode"] = "Performance"
        assert session.values["mode"] == "Balanced"

    def test_submit_empty_sensor_form_is_invalid(self, session):
        """An empty sensor form is rejected without feedback."""
        session.on_schema_select("sensor-config")

        result = asyncio.run(session.on_submit())

        assert result.state == SubmissionState.INVALID
        assert result.missing_field_labels == ["Sensor ID"]
        assert session.feedback() == []

    def test_submit_valid_sensor_form(self, session):
        """A filled sensor form settles and notifies."""
        session.on_schema_select("sensor-config")
        session.on_field_change("sensorId", "TEMP_07")
        events = []
        session.subscribe(events.append)

        result = asyncio.run(session.on_submit())

        assert result.state == SubmissionState.SETTLED_SUCCESS
        entry = session.feedback()[0]
        assert entry.kind == OutcomeKind.SUCCESS
        assert entry.schema_id == "sensor-config"
        assert events[-1].kind == SETTLED

    def test_validate_without_submitting(self, session):
        """validate() reports without touching the ledger."""
        session.on_schema_select("communication")
        result = session.validate()
        assert result.missing_field_labels == ["Protocol", "Network Name"]
        assert session.feedback() == []

    def test_clear_feedback(self, session):
        """clear_feedback empties the ledger."""
        session.on_schema_select("power")
        asyncio.run(session.on_submit())
        assert len(session.feedback()) == 1
        session.clear_feedback()
        assert session.feedback() == []

    def test_ledger_capacity_from_config(self, session):
        """The default ledger uses the configured capacity."""
        assert session.ledger.capacity == 10

    def test_injected_ledger_is_used(self, simulator):
        """An injected ledger is used even when empty."""
        ledger = FeedbackLedger(capacity=2)
        session = ConfigurationSession(ledger=ledger, channel=simulator)
        assert session.ledger is ledger


class TestRestoredState:
    """Previously persisted values are accepted without validation."""

    def test_initial_values_taken_as_is(self, simulator):
        """Restored values are accepted without validation."""
        session = ConfigurationSession(channel=simulator, selected_schema_id="sensor-config",
                                       initial_values={"sensorId": "OLD", "removedField": 1})
        assert session.values == {"sensorId": "OLD", "removedField": 1}

        result = asyncio.run(session.on_submit())

        assert result.state == SubmissionState.SETTLED_SUCCESS
        assert "removedField" not in result.payload.data

    def test_stale_invalid_values_rejected_on_submit(self, simulator):
        """Stale restored values are caught on submit."""
        session = ConfigurationSession(channel=simulator, selected_schema_id="power",
                                       initial_values={"sleepInterval": "soon"})
        result = asyncio.run(session.on_submit())
        assert result.state == SubmissionState.INVALID
        assert result.validation.errors[0].field == "sleepInterval"

    def test_unknown_restored_schema_ignored(self, simulator):
        """A restored unknown type is dropped."""
        session = ConfigurationSession(channel=simulator, selected_schema_id="retired",
                                       initial_values={"a": 1})
        assert session.selected_schema is None
        assert session.values == {}


class TestValueMapStore:
    """JSON snapshot of the value map."""

    def test_load_missing_file(self, store):
        """A missing file loads as empty."""
        assert store.load() == (None, {})

    def test_save_and_load(self, store):
        """Saved snapshots load back unchanged."""
        store.save("power", {"mode": "Performance"})
        assert store.load() == ("power", {"mode": "Performance"})

    def test_corrupt_file_ignored(self, store):
        """Unparseable JSON loads as empty."""
        store.path.write_text("{not json")
        assert store.load() == (None, {})

    def test_malformed_snapshot_ignored(self, store):
        """A snapshot with wrong types loads as empty."""
        store.path.write_text(json.dumps({"test-key": {"schemaId": 3, "values": []}}))
        assert store.load() == (None, {})

    def test_other_keys_preserved(self, store):
        """Saving keeps unrelated keys in the file."""
        store.path.write_text(json.dumps({"ui-preferences": {"theme": "dark"}}))
        store.save("power", {})
        data = json.loads(store.path.read_text())
        assert data["ui-preferences"] == {"theme": "dark"}

    def test_save_creates_missing_directories(self, tmp_path):
        """The snapshot directory is created on first save."""
        store = ValueMapStore(path=str(tmp_path / "nested" / "dir" / "state.json"), storage_key="test-key")
        store.save("power", {"mode": "Eco"})
        assert store.path.exists()
        assert store.load() == ("power", {"mode": "Eco"})

    def test_clear(self, store):
        """Clearing removes the snapshot."""
        store.save("power", {"mode": "Balanced"})
        store.clear()
        assert store.load() == (None, {})

    def test_session_writes_through_store(self, store, simulator):
        """Session edits are saved to the store."""
        session = ConfigurationSession(channel=simulator, store=store)
        session.on_schema_select("sensor-config")
        session.on_field_change("sensorId", "TEMP_07")

        schema_id, values = store.load()
        assert schema_id == "sensor-config"
        assert values["sensorId"] == "TEMP_07"

    def test_session_restores_from_store(self, store, simulator):
        """A new session picks up the stored snapshot."""
        store.save("sensor-config", {"sensorId": "TEMP_09", "unit": "Fahrenheit"})

        session = ConfigurationSession(channel=simulator, store=store)

        assert session.selected_schema.id == "sensor-config"
        assert session.values["unit"] == "Fahrenheit"
