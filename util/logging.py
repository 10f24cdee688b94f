"""
Structured logging for the configuration console.
Registry load, validation, dispatch and ledger operations all report through here.
"""

import logging
import os
from typing import Any, Dict, List

SENSITIVE_FIELDS = ['password', 'networkPassword', 'secret', 'token', 'passphrase']


class StructuredLogger:
    """Structured logger for console operations."""

    def __init__(self, name: str = "iot_console"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {details}"

        self.logger.info(message)

    def log_registry_load(self, schema_ids: List[str], status: str = "success", details: Dict[str, Any] = None):
        """Log schema registry load."""
        log_details = {"schema_count": len(schema_ids), "schema_ids": schema_ids}
        if details:
            log_details.update(details)

        self.log_operation("registry.load", status, log_details)

    def log_validation_failure(self, schema_id: str, missing_fields: List[str], error_count: int):
        """Log a rejected submission. Field values are never logged here."""
        log_details = {
            "schema_id": schema_id,
            "missing_fields": missing_fields,
            "error_count": error_count
        }
        self.log_operation("submission.validate", "rejected", log_details)

    def log_dispatch(self, schema_id: str, payload: Dict[str, Any] = None):
        """Log a payload handed to the device channel."""
        log_details = {"schema_id": schema_id}
        if payload is not None:
            log_details["payload"] = sanitize_payload(payload)

        self.log_operation("submission.dispatch", "started", log_details)

    def log_settled(self, schema_id: str, state: str, entry_id: str, outcome_kind: str, duration_ms: float = None):
        """Log a submission reaching its terminal state."""
        log_details = {
            "schema_id": schema_id,
            "entry_id": entry_id,
            "outcome": outcome_kind
        }
        if duration_ms is not None:
            log_details["duration_ms"] = round(duration_ms, 2)

        self.log_operation("submission.settled", state, log_details)

    def log_channel_failure(self, schema_id: str, error: BaseException):
        """Log a failure of the dispatch channel itself."""
        log_details = {
            "schema_id": schema_id,
            "error_type": type(error).__name__,
            "error": str(error)[:100]
        }
        self.logger.warning(f"Operation: submission.channel, Status: failed, Details: {log_details}")

    def log_ledger_eviction(self, evicted_ids: List[str], capacity: int):
        """Log entries dropped from the tail of the feedback ledger."""
        self.logger.debug(
            f"Operation: ledger.evict, Status: success, Details: "
            f"{{'evicted': {evicted_ids}, 'capacity': {capacity}}}"
        )

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)


# Global logger instance
logger = StructuredLogger()


def sanitize_payload(payload: Any, reveal_sensitive: bool = False, sensitive_fields: List[str] = None) -> Any:
    """Sanitize payloads for logging."""
    if sensitive_fields is None:
        sensitive_fields = SENSITIVE_FIELDS

    if isinstance(payload, dict):
        sanitized = {}
        for k, v in payload.items():
            if reveal_sensitive or k not in sensitive_fields:
                sanitized[k] = sanitize_payload(v, reveal_sensitive, sensitive_fields)
            else:
                sanitized[k] = "[REDACTED]"
        return sanitized
    elif isinstance(payload, str):
        # Truncate long strings
        return payload[:100] + "..." if len(payload) > 100 else payload
    elif isinstance(payload, list):
        return [sanitize_payload(item, reveal_sensitive, sensitive_fields) for item in payload]
    else:
        return payload
