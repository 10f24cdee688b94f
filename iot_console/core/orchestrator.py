"""
Submission orchestrator - runs one submit action from validation to ledger.

Flow for each submit:

1. Validate the value map against the schema; an invalid form stops here and
   never reaches the ledger
2. Build the payload from values and defaults
3. Dispatch it to the device channel (exactly one request, no retries)
4. Record the outcome, or a synthesized channel-failure entry, in the ledger
5. Notify listeners at each lifecycle step

The orchestrator does not serialize submissions. Two overlapping submits both
run to completion and append in the order they settle.
"""

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Mapping, Optional

from util.logging import logger
from . import config
from .ledger import FeedbackLedger, create_feedback_entry
from .payload import build_payload
from .schema import (
    FeedbackEntry,
    MessageSchema,
    OutcomeKind,
    SimulationOutcome,
    SubmissionPayload,
    ValidationResult,
)
from .validation import validate_form
from ..device.simulator import DeviceChannel


class SubmissionState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    INVALID = "invalid"
    BUILDING = "building"
    DISPATCHING = "dispatching"
    SETTLED_SUCCESS = "settled_success"
    SETTLED_DEVICE_ERROR = "settled_device_error"
    SETTLED_INFO = "settled_info"
    SETTLED_CHANNEL_FAILURE = "settled_channel_failure"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES = frozenset({
    SubmissionState.INVALID,
    SubmissionState.SETTLED_SUCCESS,
    SubmissionState.SETTLED_DEVICE_ERROR,
    SubmissionState.SETTLED_INFO,
    SubmissionState.SETTLED_CHANNEL_FAILURE,
})

_SETTLED_BY_KIND = {
    OutcomeKind.SUCCESS: SubmissionState.SETTLED_SUCCESS,
    OutcomeKind.ERROR: SubmissionState.SETTLED_DEVICE_ERROR,
    OutcomeKind.INFO: SubmissionState.SETTLED_INFO,
}

VALIDATION_FAILED = "validation-failed"
DISPATCH_STARTED = "dispatch-started"
SETTLED = "settled"


@dataclass
class SubmissionEvent:
    """Lifecycle notification for the presentation layer."""
    kind: str
    schema_id: str
    missing_field_labels: List[str] = field(default_factory=list)
    entry: Optional[FeedbackEntry] = None


@dataclass
class SubmissionResult:
    state: SubmissionState
    validation: Optional[ValidationResult] = None
    payload: Optional[SubmissionPayload] = None
    entry: Optional[FeedbackEntry] = None

    @property
    def missing_field_labels(self) -> List[str]:
        return self.validation.missing_field_labels if self.validation else []


Listener = Callable[[SubmissionEvent], Any]


class SubmissionOrchestrator:
    """Coordinates validate -> build -> dispatch -> record for one session.

    `state` is the last transition made by any submission and drops back to idle
    whenever one finishes. With overlapping submits it does not describe any single
    submission; follow the event stream or the returned SubmissionResult instead.
    """

    def __init__(self, ledger: FeedbackLedger, channel: DeviceChannel,
                 dispatch_timeout_sec: Optional[float] = None):
        self.ledger = ledger
        self.channel = channel
        self.dispatch_timeout_sec = dispatch_timeout_sec
        self.state = SubmissionState.IDLE
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a lifecycle listener. Returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: SubmissionEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                # A broken listener must not change the submission's outcome
                logger.error(f"Submission listener failed on '{event.kind}': {e}")

    async def submit(self, schema: MessageSchema, value_map: Mapping[str, Any]) -> SubmissionResult:
        """Run one submission to a terminal state. Never raises for channel failures."""
        try:
            return await self._run(schema, dict(value_map))
        finally:
            self.state = SubmissionState.IDLE

    async def _run(self, schema: MessageSchema, value_map: Mapping[str, Any]) -> SubmissionResult:
        self.state = SubmissionState.VALIDATING
        validation = validate_form(schema, value_map)
        if not validation.is_valid:
            self.state = SubmissionState.INVALID
            logger.log_validation_failure(schema.id, validation.missing_field_labels, len(validation.errors))
            self._emit(SubmissionEvent(VALIDATION_FAILED, schema.id,
                                       missing_field_labels=validation.missing_field_labels))
            return SubmissionResult(SubmissionState.INVALID, validation=validation)

        self.state = SubmissionState.BUILDING
        payload = build_payload(schema, value_map)

        self.state = SubmissionState.DISPATCHING
        logger.log_dispatch(schema.id, payload.data)
        self._emit(SubmissionEvent(DISPATCH_STARTED, schema.id))

        start_time = time.monotonic()
        try:
            outcome = await self._dispatch(payload)
            # A malformed outcome counts as a channel failure
            entry = create_feedback_entry(outcome.kind, outcome.message, outcome.details, schema)
            state = _SETTLED_BY_KIND[entry.kind]
        except Exception as e:
            logger.log_channel_failure(schema.id, e)
            entry = create_feedback_entry(OutcomeKind.ERROR, config.CHANNEL_FAILURE_MESSAGE,
                                          config.CHANNEL_FAILURE_DETAILS, schema)
            state = SubmissionState.SETTLED_CHANNEL_FAILURE

        self.ledger.append(entry)
        self.state = state
        logger.log_settled(schema.id, state.value, entry.id, entry.kind.value,
                           (time.monotonic() - start_time) * 1000)
        self._emit(SubmissionEvent(SETTLED, schema.id, entry=entry))

        return SubmissionResult(state, validation=validation, payload=payload, entry=entry)

    async def _dispatch(self, payload: SubmissionPayload) -> SimulationOutcome:
        if self.dispatch_timeout_sec is None:
            return await self.channel.simulate(payload)
        return await asyncio.wait_for(self.channel.simulate(payload), timeout=self.dispatch_timeout_sec)
