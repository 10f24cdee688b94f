"""
Request/response models for the console API.
"""

from pydantic import BaseModel, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime


class FieldSpecResponse(BaseModel):
    name: str
    label: str
    type: str
    required: bool
    options: Optional[List[str]] = None
    defaultValue: Optional[Any] = None


class MessageTypeResponse(BaseModel):
    id: str
    name: str
    description: str
    fields: List[FieldSpecResponse]


class MessageTypeListResponse(BaseModel):
    message_types: List[MessageTypeResponse]


class SelectRequest(BaseModel):
    schema_id: str

    @field_validator('schema_id')
    @classmethod
    def schema_id_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('schema_id cannot be empty')
        return v


class FieldChangeRequest(BaseModel):
    value: Any = None


class SessionResponse(BaseModel):
    schema_id: Optional[str]
    values: Dict[str, Any]


class FeedbackEntryResponse(BaseModel):
    id: str
    timestamp: datetime
    type: str
    message: str
    details: Optional[str] = None
    schema_id: Optional[str] = None
    schema_name: Optional[str] = None


class FeedbackListResponse(BaseModel):
    entries: List[FeedbackEntryResponse]
    count: int
    capacity: int


class SubmitResponse(BaseModel):
    state: str
    entry: Optional[FeedbackEntryResponse] = None


class ConnectionStatusResponse(BaseModel):
    connected: bool
    last_checked: Optional[datetime] = None
    success_rate: float
    interval_sec: float


class HealthResponse(BaseModel):
    status: str
    version: str
    connected: bool
    feedback_count: int
    config_issues: List[str] = []


class ValidationFieldError(BaseModel):
    field: str
    message: str
    kind: str


class ValidationErrorResponse(BaseModel):
    error_type: str = "VALIDATION_ERROR"
    message: str
    missing_fields: List[str]
    errors: List[ValidationFieldError]
    timestamp: datetime = None

    def __init__(self, **data):
        super().__init__(timestamp=datetime.now(), **data)


class ValidationResultResponse(BaseModel):
    is_valid: bool
    missing_fields: List[str]
    errors: List[ValidationFieldError]


class ErrorResponse(BaseModel):
    error_type: str
    message: str
    timestamp: datetime = None
    details: Optional[Dict[str, Any]] = None

    def __init__(self, **data):
        super().__init__(timestamp=datetime.now(), **data)
