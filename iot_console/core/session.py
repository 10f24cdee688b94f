"""
Configuration session - one dashboard's worth of state.

A session owns the value map for the selected message type, the feedback ledger
and the orchestrator. Presentation layers (the web API, the terminal console)
drive it through on_schema_select / on_field_change / on_submit and read back
feedback() or subscribe to lifecycle events.
"""

from typing import Any, Callable, Dict, List, Optional

from util.logging import logger
from . import config
from .errors import NoSchemaSelectedError, UnknownSchemaError
from .ledger import FeedbackLedger
from .orchestrator import Listener, SubmissionOrchestrator, SubmissionResult
from .persistence import ValueMapStore
from .registry import SchemaRegistry, get_registry
from .schema import FeedbackEntry, MessageSchema, ValidationResult
from .validation import validate_form
from ..device.simulator import ResponseSimulator


class ConfigurationSession:
    """Owns the value map, ledger and orchestrator for one console."""

    def __init__(self, registry: SchemaRegistry = None, ledger: FeedbackLedger = None,
                 orchestrator: SubmissionOrchestrator = None, channel=None,
                 store: ValueMapStore = None, initial_values: Dict[str, Any] = None,
                 selected_schema_id: str = None):
        self.registry = registry if registry is not None else get_registry()
        self.ledger = ledger if ledger is not None else FeedbackLedger(config.MAX_FEEDBACK_MESSAGES)

        if orchestrator is None:
            orchestrator = SubmissionOrchestrator(self.ledger, channel or ResponseSimulator(),
                                                  config.get_dispatch_timeout())
        self.orchestrator = orchestrator
        self.store = store

        if selected_schema_id is None and initial_values is None and store is not None:
            selected_schema_id, initial_values = store.load()

        self._selected: Optional[MessageSchema] = None
        self._values: Dict[str, Any] = {}

        # Restored state is taken as-is; stale ids are dropped, stale values kept
        if selected_schema_id is not None:
            schema = self.registry.get_by_id(selected_schema_id)
            if schema is None:
                logger.warning(f"Ignoring restored selection of unknown message type '{selected_schema_id}'")
            else:
                self._selected = schema
                self._values = dict(initial_values or {})

    @property
    def selected_schema(self) -> Optional[MessageSchema]:
        return self._selected

    @property
    def values(self) -> Dict[str, Any]:
        return dict(self._values)

    def _require_selection(self) -> MessageSchema:
        if self._selected is None:
            raise NoSchemaSelectedError()
        return self._selected

    def _persist(self) -> None:
        if self.store is not None:
            self.store.save(self._selected.id if self._selected else None, self._values)

    def on_schema_select(self, schema_id: str) -> MessageSchema:
        """Select a message type and re-seed the value map from its defaults."""
        schema = self.registry.get_by_id(schema_id)
        if schema is None:
            raise UnknownSchemaError(schema_id)

        self._selected = schema
        self._values = schema.defaults()
        self._persist()
        return schema

    def on_field_change(self, field_name: str, value: Any) -> None:
        self._require_selection()
        self._values[field_name] = value
        self._persist()

    def validate(self) -> ValidationResult:
        return validate_form(self._require_selection(), self._values)

    async def on_submit(self) -> SubmissionResult:
        schema = self._require_selection()
        return await self.orchestrator.submit(schema, self._values)

    def feedback(self) -> List[FeedbackEntry]:
        return self.ledger.all()

    def clear_feedback(self) -> None:
        self.ledger.clear()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self.orchestrator.subscribe(listener)
