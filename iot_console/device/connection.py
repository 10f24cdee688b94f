"""
Simulated device link status.
Re-checked on a fixed interval; each check is connected with the configured rate.
The status is advisory and never blocks a submission.
"""

import asyncio
import random
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from util.logging import logger
from ..core import config
from .simulator import RandomSource


class ConnectionMonitor:
    """Tracks whether the (simulated) device is reachable."""

    def __init__(self, success_rate: float = None, interval_sec: float = None,
                 random_source: RandomSource = None):
        self.success_rate = config.CONNECTION_SUCCESS_RATE if success_rate is None else success_rate
        self.interval_sec = config.CONNECTION_CHECK_INTERVAL_SEC if interval_sec is None else interval_sec
        if not 0.0 <= self.success_rate <= 1.0:
            raise ValueError(f"success_rate must be within [0, 1], got {self.success_rate}")
        if self.interval_sec <= 0:
            raise ValueError("interval_sec must be > 0")
        self.random_source = random_source or random.random
        self.connected = False
        self.last_checked: Optional[datetime] = None
        self.checks = 0

    def check(self) -> bool:
        previous = self.connected
        self.connected = self.random_source() < self.success_rate
        self.last_checked = datetime.now(timezone.utc)
        self.checks += 1
        if self.checks > 1 and previous != self.connected:
            logger.log_operation("connection.check", "connected" if self.connected else "disconnected",
                                 {"checks": self.checks})
        return self.connected

    def status(self) -> Dict[str, Any]:
        return {
            "connected": self.connected,
            "last_checked": self.last_checked.isoformat() if self.last_checked else None,
            "success_rate": self.success_rate,
            "interval_sec": self.interval_sec,
        }

    async def run(self, stop_event: asyncio.Event) -> None:
        """Re-check the link every interval until stop_event is set."""
        while not stop_event.is_set():
            self.check()
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.interval_sec)
            except asyncio.TimeoutError:
                continue
