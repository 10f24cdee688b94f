"""
Configuration for the IoT configuration console.
All settings come from the environment (optionally a .env file).
"""

import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

# Debug flag
DEBUG = os.getenv("DEBUG", "false").lower() == "true"

# Response simulator latency bounds (milliseconds)
SIM_MIN_DELAY_MS = int(os.getenv("SIM_MIN_DELAY_MS", "1000"))
SIM_MAX_DELAY_MS = int(os.getenv("SIM_MAX_DELAY_MS", "3000"))

# Feedback ledger capacity
MAX_FEEDBACK_MESSAGES = int(os.getenv("MAX_FEEDBACK_MESSAGES", "10"))

# Simulated link status
CONNECTION_CHECK_INTERVAL_SEC = float(os.getenv("CONNECTION_CHECK_INTERVAL_SEC", "5"))
CONNECTION_SUCCESS_RATE = float(os.getenv("CONNECTION_SUCCESS_RATE", "0.9"))

# Optional upper bound on a single dispatch; unset means no timeout
DISPATCH_TIMEOUT_SEC = os.getenv("DISPATCH_TIMEOUT_SEC")

# Value-map snapshot
STATE_PATH = os.getenv("STATE_PATH", "./data/iot-console.json")
STORAGE_KEY = os.getenv("STORAGE_KEY", "iot-config-data")
STATE_PERSISTENCE_ENABLED = os.getenv("STATE_PERSISTENCE_ENABLED", "true").lower() == "true"

# User-facing messages
REQUIRED_FIELD_ERROR = "Missing Required Fields"
COMMUNICATION_ERROR = "Communication Error"
SENDING_TITLE = "Sending Configuration"
SENDING_DESCRIPTION = "Processing your request..."
CHANNEL_FAILURE_MESSAGE = "Communication failed"
CHANNEL_FAILURE_DETAILS = "Unable to reach IoT device"

# Text display limits
MAX_DESCRIPTION_LENGTH = 60
MAX_TRUNCATE_LENGTH = 100

# Version string
VERSION = "1.0.0"


def debug_enabled():
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "false").lower() == "true"


def get_dispatch_timeout() -> Optional[float]:
    """Get the dispatch timeout in seconds, or None when unbounded."""
    if DISPATCH_TIMEOUT_SEC in (None, ""):
        return None
    return float(DISPATCH_TIMEOUT_SEC)


def truncate_text(text: Optional[str], max_length: int = MAX_TRUNCATE_LENGTH) -> str:
    """Shorten text for display, appending an ellipsis when cut."""
    if not text:
        return ""
    if len(text) <= max_length:
        return text
    return text[:max_length].rstrip() + "..."


def validate_config():
    """Validate console configuration and return any issues."""
    issues = []

    if SIM_MIN_DELAY_MS < 0:
        issues.append("SIM_MIN_DELAY_MS must be >= 0")

    if SIM_MAX_DELAY_MS < SIM_MIN_DELAY_MS:
        issues.append("SIM_MAX_DELAY_MS must be >= SIM_MIN_DELAY_MS")

    if MAX_FEEDBACK_MESSAGES < 1:
        issues.append("MAX_FEEDBACK_MESSAGES must be >= 1")

    if not 0.0 <= CONNECTION_SUCCESS_RATE <= 1.0:
        issues.append(f"Invalid CONNECTION_SUCCESS_RATE: {CONNECTION_SUCCESS_RATE}")

    if CONNECTION_CHECK_INTERVAL_SEC <= 0:
        issues.append("CONNECTION_CHECK_INTERVAL_SEC must be > 0")

    try:
        timeout = get_dispatch_timeout()
        if timeout is not None and timeout <= 0:
            issues.append("DISPATCH_TIMEOUT_SEC must be > 0")
    except ValueError:
        issues.append(f"Invalid DISPATCH_TIMEOUT_SEC: {DISPATCH_TIMEOUT_SEC}")

    return issues
