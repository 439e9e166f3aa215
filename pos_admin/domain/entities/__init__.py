from .entity_schema import EntitySchema, FieldKind, FieldSpec, FieldValue
from .form_record import FormRecord, shape_record
from .form_state import (
    ControllerState,
    FormMode,
    FormOutcome,
    FormSignal,
    Notice,
    NoticeLevel,
    RepositoryCall,
)
from .select_option import SelectOption

__all__ = [
    "EntitySchema",
    "FieldKind",
    "FieldSpec",
    "FieldValue",
    "FormRecord",
    "shape_record",
    "ControllerState",
    "FormMode",
    "FormOutcome",
    "FormSignal",
    "Notice",
    "NoticeLevel",
    "RepositoryCall",
    "SelectOption",
]
