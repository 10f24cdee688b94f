"""
Response simulator - stands in for the IoT device on the other end of the channel.

Each call waits a random latency and then picks an outcome from a weighted
scenario table. The entropy source and the sleep function are injectable so
tests can force every branch without waiting.

A real protocol client would replace this class by implementing the same
async simulate(payload) method; raising from it signals a channel failure.
"""

import asyncio
import math
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Protocol, Sequence

from util.logging import logger
from ..core import config
from ..core.schema import OutcomeKind, SimulationOutcome, SubmissionPayload

RandomSource = Callable[[], float]
SleepFunc = Callable[[float], Awaitable[None]]

WEIGHT_TOLERANCE = 1e-6


@dataclass(frozen=True)
class Scenario:
    kind: OutcomeKind
    message: str
    details: Optional[str] = None
    weight: float = 0.0

    def to_outcome(self) -> SimulationOutcome:
        return SimulationOutcome(kind=self.kind, message=self.message, details=self.details)


DEFAULT_SCENARIOS = (
    Scenario(OutcomeKind.SUCCESS, "Configuration applied successfully", weight=0.4),
    Scenario(
        OutcomeKind.SUCCESS,
        "Advanced configuration profile activated successfully",
        "The new configuration has been applied to all connected sensors. The system has "
        "automatically optimized power consumption settings, updated communication protocols "
        "to use the latest security standards, and synchronized all device clocks. All "
        "subsystems are now operating at peak efficiency with enhanced monitoring capabilities enabled.",
        weight=0.2,
    ),
    Scenario(OutcomeKind.ERROR, "Failed to apply configuration",
             "Invalid sensor type for current firmware", weight=0.1),
    Scenario(
        OutcomeKind.ERROR,
        "Critical configuration error detected",
        "The configuration could not be applied due to multiple compatibility issues. The "
        "selected communication protocol is not supported by the current firmware version "
        "(v2.1.3). Additionally, the power management settings conflict with the hardware "
        "specifications of the connected sensors. Please update the firmware to version 2.2.0 "
        "or higher, verify sensor compatibility, and ensure all network requirements are met "
        "before attempting to apply this configuration again.",
        weight=0.1,
    ),
    Scenario(OutcomeKind.INFO, "Configuration queued for processing",
             "Device is currently busy, will apply when available", weight=0.1),
    Scenario(
        OutcomeKind.INFO,
        "Partial configuration applied with warnings",
        "The configuration has been partially applied to your IoT device network. While most "
        "settings were successfully updated, some advanced features could not be activated due "
        "to current system limitations. The temperature sensors have been configured with the "
        "new sampling rate, communication protocols have been updated, and power management is "
        "now optimized. However, the redundancy backup system and advanced encryption features "
        "are pending due to insufficient memory allocation. These features will be automatically "
        "enabled once the next system maintenance cycle completes, which is scheduled for the "
        "next 24-hour period.",
        weight=0.1,
    ),
)


class DeviceChannel(Protocol):
    async def simulate(self, payload: SubmissionPayload) -> SimulationOutcome:
        ...


def validate_scenarios(scenarios: Sequence[Scenario]) -> None:
    """Raise ValueError unless the table is non-empty with weights summing to 1."""
    if not scenarios:
        raise ValueError("Scenario table must not be empty")
    for scenario in scenarios:
        if scenario.weight < 0:
            raise ValueError(f"Scenario weight must be >= 0: {scenario.message}")
    total = math.fsum(s.weight for s in scenarios)
    if abs(total - 1.0) > WEIGHT_TOLERANCE:
        raise ValueError(f"Scenario weights must sum to 1.0, got {total}")


def select_scenario(scenarios: Sequence[Scenario], r: float) -> Scenario:
    """Pick the first scenario whose cumulative weight reaches r.

    Falls back to the first scenario when rounding leaves r above the total.
    """
    cumulative = 0.0
    for scenario in scenarios:
        cumulative += scenario.weight
        if r <= cumulative:
            return scenario
    return scenarios[0]


class ResponseSimulator:
    """Latency-bearing, weighted-random outcome generator."""

    def __init__(self, scenarios: Sequence[Scenario] = DEFAULT_SCENARIOS,
                 min_delay_ms: float = None, max_delay_ms: float = None,
                 random_source: RandomSource = None, sleep: SleepFunc = None):
        validate_scenarios(scenarios)
        self.scenarios = tuple(scenarios)
        self.min_delay_ms = config.SIM_MIN_DELAY_MS if min_delay_ms is None else min_delay_ms
        self.max_delay_ms = config.SIM_MAX_DELAY_MS if max_delay_ms is None else max_delay_ms
        if self.min_delay_ms < 0 or self.min_delay_ms > self.max_delay_ms:
            raise ValueError(f"Invalid delay bounds: [{self.min_delay_ms}, {self.max_delay_ms}]")
        self.random_source = random_source or random.random
        self.sleep = sleep or asyncio.sleep

    def draw_delay_ms(self) -> float:
        return self.min_delay_ms + self.random_source() * (self.max_delay_ms - self.min_delay_ms)

    def select_outcome(self) -> SimulationOutcome:
        return select_scenario(self.scenarios, self.random_source()).to_outcome()

    async def simulate(self, payload: SubmissionPayload) -> SimulationOutcome:
        delay_ms = self.draw_delay_ms()
        logger.debug(f"Simulating device response for '{payload.schema_id}' after {delay_ms:.0f}ms")
        await self.sleep(delay_ms / 1000.0)
        outcome = self.select_outcome()
        logger.debug(f"Simulated outcome for '{payload.schema_id}': {outcome.kind.value} - {outcome.message}")
        return outcome
