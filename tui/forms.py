"""
Form helpers for the terminal console.
Turn widget input into value-map entries and ledger entries into display lines.
"""

from typing import Any, List, Optional

from iot_console.core.config import MAX_DESCRIPTION_LENGTH, MAX_TRUNCATE_LENGTH, truncate_text
from iot_console.core.schema import FeedbackEntry, FieldKind, FieldSpec, MessageSchema

KIND_ICONS = {
    "success": "✅",
    "error": "❌",
    "info": "ℹ️",
}

NOTIFY_SEVERITY = {
    "success": "information",
    "error": "error",
    "info": "information",
}


def field_widget_id(field_name: str) -> str:
    return f"field-{field_name}"


def field_name_from_widget_id(widget_id: Optional[str]) -> Optional[str]:
    if not widget_id or not widget_id.startswith("field-"):
        return None
    return widget_id[len("field-"):]


def coerce_input(spec: FieldSpec, text: str) -> Any:
    """Convert raw text from an Input widget into a value-map entry.

    Numbers become int or float when they parse; anything else is kept as typed
    so validation can report it. Empty input clears the field.
    """
    if text == "":
        return None
    if spec.kind != FieldKind.NUMBER:
        return text

    stripped = text.strip()
    try:
        return int(stripped)
    except ValueError:
        pass
    try:
        return float(stripped)
    except ValueError:
        return text


def display_value(value: Any) -> str:
    """Text to prefill an Input widget with."""
    if value is None:
        return ""
    return str(value)


def schema_summary(schema: MessageSchema) -> str:
    required = sum(1 for f in schema.fields if f.required)
    return (f"{schema.name} - {truncate_text(schema.description, MAX_DESCRIPTION_LENGTH)} "
            f"({len(schema.fields)} fields, {required} required)")


def format_entry(entry: FeedbackEntry, max_details: int = MAX_TRUNCATE_LENGTH) -> str:
    icon = KIND_ICONS.get(entry.kind.value, "•")
    line = f"{entry.timestamp.strftime('%H:%M:%S')} {icon} {entry.message}"
    if entry.schema_name:
        line += f" [{entry.schema_name}]"
    if entry.details:
        line += f"\n    {truncate_text(entry.details, max_details)}"
    return line


def format_feedback(entries: List[FeedbackEntry]) -> str:
    if not entries:
        return "No device responses yet"
    return "\n".join(format_entry(e) for e in entries)
