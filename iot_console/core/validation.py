"""
Field validation for message schemas.

Required fields are checked against what the user actually entered, never the
field default, so a default cannot satisfy a required constraint. Enumerated
values are not checked against their options.
"""

import math
from typing import Any, Mapping

from .schema import (
    MISSING,
    ErrorKind,
    FieldKind,
    FieldSpec,
    MessageSchema,
    ValidationError,
    ValidationResult,
)


def effective_value(spec: FieldSpec, value_map: Mapping[str, Any], use_default: bool = True) -> Any:
    """Resolve the value an operation should use for one field.

    With use_default the field default (or None when there is none) stands in
    for an absent or None entry; without it, absent entries resolve to MISSING.
    """
    value = value_map.get(spec.name, MISSING)
    if not use_default:
        return value
    if value is MISSING or value is None:
        return spec.default_value if spec.has_default else None
    return value


def is_blank(value: Any) -> bool:
    return value is MISSING or value is None or value == ""


RADIX_PREFIXES = ("0x", "0o", "0b")


def is_numeric(value: Any) -> bool:
    """True if value coerces to a finite number. Booleans do not count.

    Strings follow browser number coercion: whitespace-only text reads as 0,
    0x/0o/0b literals are accepted, and digit separators ("1_000") or
    non-ASCII digits are not.
    """
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return math.isfinite(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return True
        if "_" in text or not text.isascii():
            return False
        if text[:2].lower() in RADIX_PREFIXES:
            try:
                int(text, 0)
            except ValueError:
                return False
            return True
        try:
            return math.isfinite(float(text))
        except ValueError:
            return False
    return False


def validate_field(spec: FieldSpec, value: Any = MISSING) -> ValidationResult:
    errors = []

    if spec.required and is_blank(value):
        errors.append(ValidationError(spec.name, spec.label, f"{spec.label} is required", ErrorKind.REQUIRED))

    if spec.kind == FieldKind.NUMBER and not is_blank(value) and not is_numeric(value):
        errors.append(
            ValidationError(spec.name, spec.label, f"{spec.label} must be a valid number", ErrorKind.INVALID_TYPE)
        )

    return ValidationResult(is_valid=not errors, errors=errors)


def validate_form(schema: MessageSchema, value_map: Mapping[str, Any]) -> ValidationResult:
    """Validate every field of the schema, in field order."""
    errors = []
    for spec in schema.fields:
        result = validate_field(spec, effective_value(spec, value_map, use_default=False))
        errors.extend(result.errors)

    return ValidationResult(is_valid=not errors, errors=errors)
