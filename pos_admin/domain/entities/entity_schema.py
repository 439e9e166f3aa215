"""Domain entities describing a manageable entity type and its form fields."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

# Sum type for a single form value
FieldValue = Union[str, int, float, bool]


class FieldKind(str, Enum):
    """Input kind of a form field; selects coercion and validation rules."""

    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    SELECT = "select"


@dataclass(frozen=True)
class FieldSpec:
    """Declarative rules for one form field."""

    name: str
    label: str = ""
    kind: FieldKind = FieldKind.TEXT
    required: bool = False
    max_length: int | None = None
    pattern: str | None = None
    pattern_message: str | None = None
    unique_among_existing: bool = False
    unique_case_insensitive: bool = False
    unique_scope: tuple[str, ...] = ()
    min_value: float | None = None
    max_value: float | None = None
    choices: tuple[str, ...] = ()
    options_from: str | None = None
    after_field: str | None = None
    uppercase: bool = False
    allowed_chars: str | None = None  # regex character class, e.g. "A-Z0-9"
    truncate: bool = False
    default: FieldValue | None = None

    @property
    def display_name(self) -> str:
        return self.label or self.name.replace("_", " ").title()

    def blank_value(self) -> FieldValue:
        """Value of this field in a freshly cleared form."""
        if self.default is not None:
            return self.default
        if self.kind == FieldKind.BOOLEAN:
            return False
        return ""


@dataclass(frozen=True)
class EntitySchema:
    """Configuration for one master-data screen.

    ``primary_key`` identifies a persisted record for update/delete and may be
    a surrogate id that is not part of the form. ``code_field`` is the business
    code shown to users; it is the field locked on edit and the grouping key
    for versioned entities (those with an ``effective_from_field``).
    """

    entity_type: str
    resource: str
    primary_key: str
    fields: tuple[FieldSpec, ...]
    title: str = ""
    code_field: str | None = None
    label_field: str | None = None
    code_lock_on_edit: bool = True
    effective_from_field: str | None = None
    search_fields: tuple[str, ...] = ()
    default_sort: str | None = None

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    @property
    def is_versioned(self) -> bool:
        return self.effective_from_field is not None

    @property
    def business_code_field(self) -> str | None:
        """The field that becomes read-only once a record is opened for edit."""
        if self.code_field:
            return self.code_field
        if self.primary_key in self.field_names:
            return self.primary_key
        return None

    @property
    def display_title(self) -> str:
        return self.title or self.entity_type.replace("_", " ").title()

    def get_field(self, name: str) -> FieldSpec:
        for spec in self.fields:
            if spec.name == name:
                return spec
        raise KeyError(f"{self.entity_type} has no field '{name}'")

    def has_field(self, name: str) -> bool:
        return any(spec.name == name for spec in self.fields)

    def blank_record(self) -> dict[str, FieldValue]:
        """A schema-shaped record with every field at its blank value."""
        return {spec.name: spec.blank_value() for spec in self.fields}
