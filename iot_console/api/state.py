"""
Process-wide API state: the console session and the link monitor.
Endpoints receive these through FastAPI dependencies so tests can override them.
"""

from typing import Optional

from ..core import config
from ..core.persistence import ValueMapStore
from ..core.session import ConfigurationSession
from ..device.connection import ConnectionMonitor

_session: Optional[ConfigurationSession] = None
_monitor: Optional[ConnectionMonitor] = None


def get_session() -> ConfigurationSession:
    global _session
    if _session is None:
        store = ValueMapStore() if config.STATE_PERSISTENCE_ENABLED else None
        _session = ConfigurationSession(store=store)
    return _session


def get_monitor() -> ConnectionMonitor:
    global _monitor
    if _monitor is None:
        _monitor = ConnectionMonitor()
    return _monitor


def reset_state() -> None:
    """Drop the cached session and monitor."""
    global _session, _monitor
    _session = None
    _monitor = None
