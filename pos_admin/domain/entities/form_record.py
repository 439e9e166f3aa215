"""Helpers that map loosely-shaped persisted records onto schema-shaped form records."""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

from pos_admin.domain.dates import parse_effective_date

from .entity_schema import EntitySchema, FieldKind, FieldSpec, FieldValue

FormRecord = dict[str, FieldValue]

_TRUE_STRINGS = frozenset({"1", "true", "yes", "y", "on"})


def coerce_boolean(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def format_number(value: Any) -> str:
    """Render a persisted numeric value as the numeric string a form input holds."""
    if value is None or value == "":
        return ""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int):
        return str(value)
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        return str(value)
    if number == number.to_integral_value() and "." not in str(value):
        return str(int(number))
    return str(value).strip()


def parse_number(value: FieldValue) -> Decimal | None:
    """Parse a numeric form value; ``None`` when blank or not a number."""
    if isinstance(value, bool):
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        number = Decimal(text)
    except InvalidOperation:
        return None
    if not number.is_finite():
        return None
    return number


def _shape_value(spec: FieldSpec, raw: Any) -> FieldValue:
    if raw is None:
        return spec.blank_value()
    if spec.kind == FieldKind.BOOLEAN:
        return coerce_boolean(raw)
    if spec.kind == FieldKind.NUMBER:
        return format_number(raw)
    if spec.kind == FieldKind.DATE:
        # Backends return DATE columns as ISO timestamps; the form keeps the
        # calendar date the temporal resolver would see.
        text = str(raw)
        if isinstance(raw, date) or (len(text) > 10 and text[4:5] == "-"):
            parsed = parse_effective_date(raw)
            if parsed is not None:
                return parsed.isoformat()
        return text
    return str(raw)


def shape_record(schema: EntitySchema, raw: Mapping[str, Any]) -> FormRecord:
    """Project a persisted record onto the schema's field list.

    Missing fields take their blank value and keys the schema does not
    declare (surrogate ids, audit columns) are dropped.
    """
    return {
        spec.name: _shape_value(spec, raw.get(spec.name)) if spec.name in raw else spec.blank_value()
        for spec in schema.fields
    }


def is_blank(value: FieldValue) -> bool:
    if isinstance(value, bool):
        return False
    return str(value).strip() == ""
