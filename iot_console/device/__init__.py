"""Device-side stand-ins: response simulator and link status."""

from .simulator import DEFAULT_SCENARIOS, DeviceChannel, ResponseSimulator, Scenario, select_scenario
from .connection import ConnectionMonitor
