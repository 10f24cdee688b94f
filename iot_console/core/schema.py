"""
Domain records for the configuration console.
Message schemas, validation results, payloads, outcomes and feedback entries.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class _Missing:
    """Marker for "no value supplied", distinct from None."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "MISSING"

    def __bool__(self):
        return False


MISSING = _Missing()


class FieldKind(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    DROPDOWN = "dropdown"
    RADIO = "radio"
    BOOLEAN = "boolean"

    @property
    def is_enumerated(self) -> bool:
        return self in (FieldKind.DROPDOWN, FieldKind.RADIO)


class ErrorKind(str, Enum):
    REQUIRED = "REQUIRED"
    INVALID_TYPE = "INVALID_TYPE"


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass(frozen=True)
class FieldSpec:
    name: str
    label: str
    kind: FieldKind
    options: Tuple[str, ...] = ()
    required: bool = False
    default_value: Any = MISSING

    @property
    def has_default(self) -> bool:
        return self.default_value is not MISSING

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "name": self.name,
            "label": self.label,
            "type": self.kind.value,
            "required": self.required,
        }
        if self.kind.is_enumerated:
            data["options"] = list(self.options)
        if self.has_default:
            data["defaultValue"] = self.default_value
        return data


@dataclass(frozen=True)
class MessageSchema:
    id: str
    name: str
    description: str
    fields: Tuple[FieldSpec, ...]

    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def get_field(self, name: str) -> Optional[FieldSpec]:
        for spec in self.fields:
            if spec.name == name:
                return spec
        return None

    def defaults(self) -> Dict[str, Any]:
        """Value map seeded from field defaults; fields without one are left out."""
        return {f.name: f.default_value for f in self.fields if f.has_default}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "fields": [f.to_dict() for f in self.fields],
        }


@dataclass(frozen=True)
class ValidationError:
    field: str
    label: str
    message: str
    kind: ErrorKind


@dataclass
class ValidationResult:
    is_valid: bool
    errors: List[ValidationError] = field(default_factory=list)

    @property
    def missing_field_labels(self) -> List[str]:
        return [e.label for e in self.errors if e.kind == ErrorKind.REQUIRED]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "missing_fields": self.missing_field_labels,
            "errors": [
                {"field": e.field, "message": e.message, "kind": e.kind.value}
                for e in self.errors
            ],
        }


@dataclass(frozen=True)
class SubmissionPayload:
    schema_id: str
    submitted_at: datetime
    data: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "messageType": self.schema_id,
            "timestamp": self.submitted_at.isoformat(),
            "data": dict(self.data),
        }


@dataclass(frozen=True)
class SimulationOutcome:
    kind: OutcomeKind
    message: str
    details: Optional[str] = None


@dataclass(frozen=True)
class FeedbackEntry:
    id: str
    timestamp: datetime
    kind: OutcomeKind
    message: str
    details: Optional[str] = None
    schema_id: Optional[str] = None
    schema_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "type": self.kind.value,
            "message": self.message,
            "details": self.details,
            "schema_id": self.schema_id,
            "schema_name": self.schema_name,
        }
