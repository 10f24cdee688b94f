"""
Payload builder - merges a value map with schema defaults.
Assumes the value map has already passed validation.
"""

from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from .schema import MessageSchema, SubmissionPayload
from .validation import effective_value


def build_payload(schema: MessageSchema, value_map: Mapping[str, Any],
                  now: Optional[datetime] = None) -> SubmissionPayload:
    """Build the submission payload; every schema field gets an entry."""
    data = {spec.name: effective_value(spec, value_map) for spec in schema.fields}
    return SubmissionPayload(
        schema_id=schema.id,
        submitted_at=now or datetime.now(timezone.utc),
        data=data,
    )
