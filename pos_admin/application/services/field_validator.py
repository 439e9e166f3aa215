"""Field-level input coercion and validation driven by an EntitySchema."""

import re
from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any

from pos_admin.domain.dates import parse_effective_date
from pos_admin.domain.entities import EntitySchema, FieldKind, FieldSpec, FieldValue
from pos_admin.domain.entities.form_record import (
    coerce_boolean,
    format_number,
    is_blank,
    parse_number,
)

_NUMERIC_INPUT = re.compile(r"[^0-9.\-]")


def coerce_input(spec: FieldSpec, value: Any) -> FieldValue:
    """Turn a raw input value into the form value for ``spec``.

    Checkboxes become booleans, number inputs become numeric strings.
    Text filters (``uppercase``, ``allowed_chars``, ``truncate``) run in
    that order, the way the screens sanitise keystrokes.
    """
    if spec.kind == FieldKind.BOOLEAN:
        return coerce_boolean(value)

    if value is None:
        text = ""
    elif spec.kind == FieldKind.NUMBER and isinstance(value, (int, float, Decimal)):
        text = format_number(value)
    else:
        text = str(value)

    if spec.kind == FieldKind.NUMBER:
        text = _NUMERIC_INPUT.sub("", text)
    if spec.uppercase:
        text = text.upper()
    if spec.allowed_chars:
        text = re.sub(f"[^{spec.allowed_chars}]", "", text)
    if spec.truncate and spec.max_length is not None:
        text = text[: spec.max_length]
    return text


class FieldValidator:
    """Runs a schema's field rules against a form record.

    Every field is checked so all problems can be shown at once; within a
    field the first failing rule supplies the message.
    """

    def __init__(self, schema: EntitySchema):
        self._schema = schema

    def validate(
        self,
        form: Mapping[str, FieldValue],
        records: Sequence[Mapping[str, Any]] = (),
        selected_index: int | None = None,
    ) -> dict[str, str]:
        errors: dict[str, str] = {}
        for spec in self._schema.fields:
            message = self._check_field(spec, form, records, selected_index)
            if message:
                errors[spec.name] = message
        return errors

    def _check_field(
        self,
        spec: FieldSpec,
        form: Mapping[str, FieldValue],
        records: Sequence[Mapping[str, Any]],
        selected_index: int | None,
    ) -> str | None:
        value = form.get(spec.name, spec.blank_value())
        label = spec.display_name

        if is_blank(value):
            if spec.required:
                return f"{label} is required"
            return None
        if spec.kind == FieldKind.BOOLEAN:
            return None

        text = str(value)
        if spec.max_length is not None and len(text) > spec.max_length:
            return f"{label} must not exceed {spec.max_length} characters"
        if spec.pattern and not re.fullmatch(spec.pattern, text):
            return spec.pattern_message or f"{label} has an invalid format"

        if spec.kind == FieldKind.NUMBER:
            message = self._check_number(spec, text)
            if message:
                return message
        if spec.kind == FieldKind.DATE:
            message = self._check_date(spec, text, form)
            if message:
                return message
        if spec.choices and text not in spec.choices:
            return f"{label} must be one of: {', '.join(spec.choices)}"

        if spec.unique_among_existing and self._is_duplicate(spec, form, records, selected_index):
            if spec.unique_scope:
                scope = ", ".join(self._schema.get_field(n).display_name for n in spec.unique_scope)
                return f"{label} already exists for this {scope}"
            return f"{label} already exists"
        return None

    @staticmethod
    def _check_number(spec: FieldSpec, text: str) -> str | None:
        number = parse_number(text)
        label = spec.display_name
        if number is None:
            return f"{label} must be a valid number"
        if spec.min_value is not None and number < Decimal(str(spec.min_value)):
            if spec.min_value == 1:
                return f"{label} must be a positive number"
            if spec.min_value == 0:
                return f"{label} cannot be negative"
            return f"{label} must be at least {format_number(spec.min_value)}"
        if spec.max_value is not None and number > Decimal(str(spec.max_value)):
            return f"{label} must not exceed {format_number(spec.max_value)}"
        return None

    def _check_date(
        self, spec: FieldSpec, text: str, form: Mapping[str, FieldValue]
    ) -> str | None:
        current = parse_effective_date(text)
        if current is None:
            return f"{spec.display_name} must be a valid date"
        if spec.after_field:
            other = parse_effective_date(form.get(spec.after_field))
            if other is not None and current <= other:
                other_label = self._schema.get_field(spec.after_field).display_name
                return f"{spec.display_name} date must be after {other_label} date"
        return None

    def _is_duplicate(
        self,
        spec: FieldSpec,
        form: Mapping[str, FieldValue],
        records: Sequence[Mapping[str, Any]],
        selected_index: int | None,
    ) -> bool:
        key = self._comparable(spec, form.get(spec.name))
        scope = [
            (name, self._comparable(self._schema.get_field(name), form.get(name)))
            for name in spec.unique_scope
        ]
        for index, record in enumerate(records):
            if index == selected_index:
                continue
            if self._comparable(spec, record.get(spec.name)) != key:
                continue
            if all(
                self._comparable(self._schema.get_field(name), record.get(name)) == expected
                for name, expected in scope
            ):
                return True
        return False

    @staticmethod
    def _comparable(spec: FieldSpec, value: Any) -> Any:
        if value is None:
            return ""
        if spec.kind == FieldKind.NUMBER:
            number = parse_number(value)
            return number if number is not None else str(value).strip()
        if spec.kind == FieldKind.BOOLEAN:
            return coerce_boolean(value)
        if spec.kind == FieldKind.DATE:
            parsed = parse_effective_date(value)
            return parsed if parsed is not None else str(value).strip()
        text = str(value).strip()
        return text.lower() if spec.unique_case_insensitive else text
