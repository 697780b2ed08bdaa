"""
Field specifications for form submissions.

A form is described as a tuple of ``FieldSpec`` entries. Each spec
names the wire field, the label it is stored under upstream, how its
value is normalized and, for required fields, the message reported
when it is missing or invalid. Validation stops at the first failing
field in declaration order.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..core.errors import InvalidField

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# Free text such as "why do you want to join" is capped before storage
LONG_TEXT_LIMIT = 5000


class FieldKind(str, Enum):
    """How a field's raw value is normalized."""
    TEXT = "text"
    EMAIL = "email"
    LONG_TEXT = "long_text"
    MULTI = "multi"
    FLAG = "flag"


@dataclass(frozen=True)
class FieldSpec:
    """
    Description of one form field.

    Attributes:
        name: Field name in the JSON request body
        label: Column/field name upstream; None keeps the value out of the record
        kind: Normalization applied to the value
        required: Whether the field must be a non-empty string
        missing_message: Error reported when a required field is absent or blank
        invalid_message: Error reported when an email fails the shape check
        max_length: Cap applied to LONG_TEXT values
    """
    name: str
    label: Optional[str] = None
    kind: FieldKind = FieldKind.TEXT
    required: bool = False
    missing_message: Optional[str] = None
    invalid_message: Optional[str] = None
    max_length: int = LONG_TEXT_LIMIT


def is_valid_email(email: str) -> bool:
    """Simple ``local@domain.tld`` shape check."""
    return bool(EMAIL_PATTERN.match(email))


def scalar_text(value: Any) -> Optional[str]:
    """Trimmed text for strings and numbers; None for anything else."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (str, int, float)):
        return str(value).strip()
    return None


def validate_fields(body: dict[str, Any], specs: tuple[FieldSpec, ...]) -> None:
    """
    Check required fields in declaration order.

    Raises:
        InvalidField: for the first required field that is missing,
            blank or (for emails) not shaped like an address
    """
    for spec in specs:
        if not spec.required:
            continue

        value = body.get(spec.name)
        missing_message = spec.missing_message or f"{spec.name} is required"
        if not isinstance(value, str) or not value.strip():
            raise InvalidField(spec.name, missing_message)

        if spec.kind == FieldKind.EMAIL and not is_valid_email(value.strip()):
            raise InvalidField(spec.name, spec.invalid_message or missing_message)


def clean_value(spec: FieldSpec, raw: Any) -> Any:
    """
    Normalize one raw value according to its spec.

    Returns None when the value should be left out of the submission.
    FLAG fields never return None: anything other than JSON ``true``
    is False.
    """
    if spec.kind == FieldKind.FLAG:
        return raw is True

    if spec.kind == FieldKind.MULTI:
        if raw is None:
            return None
        items = raw if isinstance(raw, list) else [raw]
        cleaned = [text for text in (scalar_text(item) for item in items) if text]
        return cleaned or None

    text = scalar_text(raw)
    if not text:
        return None
    if spec.kind == FieldKind.LONG_TEXT:
        return text[:spec.max_length]
    return text


def sanitize_fields(body: dict[str, Any], specs: tuple[FieldSpec, ...]) -> dict[str, Any]:
    """
    Trim, cap and normalize the declared fields of a request body.

    Undeclared keys are dropped. Optional fields that end up empty are
    omitted entirely.

    Returns:
        Mapping of wire field name to cleaned value
    """
    values: dict[str, Any] = {}
    for spec in specs:
        cleaned = clean_value(spec, body.get(spec.name))
        if cleaned is not None:
            values[spec.name] = cleaned
    return values


def map_to_record(values: dict[str, Any], specs: tuple[FieldSpec, ...]) -> dict[str, Any]:
    """Rename cleaned values to the upstream store's field labels."""
    record: dict[str, Any] = {}
    for spec in specs:
        if spec.label and spec.name in values:
            record[spec.label] = values[spec.name]
    return record
