"""Domain entities for the form lifecycle: state, signals, notices and outcomes."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .entity_schema import EntitySchema, FieldValue


class FormMode(str, Enum):
    ADD = "Add"
    EDIT = "Edit"
    DELETE = "Delete"
    SEARCH = "Search"

    @property
    def verb(self) -> str:
        """Verb used in user-facing prompts ("Please select a record to edit:")."""
        return {
            FormMode.ADD: "add",
            FormMode.EDIT: "edit",
            FormMode.DELETE: "delete",
            FormMode.SEARCH: "view",
        }[self]


class FormSignal(str, Enum):
    """What a transition produced, for the rendering layer to act on."""

    MODE_CHANGED = "mode_changed"
    SELECTION_REQUIRED = "selection_required"
    NO_RECORDS_AVAILABLE = "no_records_available"
    RECORD_SELECTED = "record_selected"
    CONFIRM_DELETE_REQUIRED = "confirm_delete_required"
    INVALID_SELECTION = "invalid_selection"
    UPDATED = "updated"
    READ_ONLY = "read_only"
    VALIDATED = "validated"
    VALIDATION_FAILED = "validation_failed"
    NO_CHANGE = "no_change"
    NOT_ALLOWED = "not_allowed"
    BUSY = "busy"
    SAVED = "saved"
    DELETED = "deleted"
    REPOSITORY_FAILURE = "repository_failure"
    CLEARED = "cleared"
    LOADED = "loaded"
    DISCARDED = "discarded"


class NoticeLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    """A user-visible message.

    Info and success notices are transient popups; error notices are
    dismissable banners and carry no auto-dismiss delay.
    """

    level: NoticeLevel
    text: str
    auto_dismiss_seconds: float | None = None


@dataclass(frozen=True)
class ControllerState:
    """Immutable snapshot of one screen's form; transitions return new instances."""

    mode: FormMode
    current_form: dict[str, FieldValue]
    loaded_form: dict[str, FieldValue]
    selected_index: int | None = None
    is_dirty: bool = False
    field_errors: dict[str, str] = field(default_factory=dict)
    locked_fields: frozenset[str] = frozenset()
    awaiting_delete_confirmation: bool = False
    is_submitting: bool = False

    @classmethod
    def initial(cls, schema: EntitySchema) -> "ControllerState":
        return cls(
            mode=FormMode.ADD,
            current_form=schema.blank_record(),
            loaded_form=schema.blank_record(),
        )

    @property
    def has_selection(self) -> bool:
        return self.selected_index is not None

    @property
    def is_read_only(self) -> bool:
        return self.mode == FormMode.SEARCH or self.awaiting_delete_confirmation


@dataclass(frozen=True)
class RepositoryCall:
    """Side effect requested by a transition, executed by the controller shell."""

    operation: str  # "create" | "update" | "delete"
    record_id: Any = None
    payload: dict[str, FieldValue] | None = None


@dataclass(frozen=True)
class FormOutcome:
    state: ControllerState
    signal: FormSignal
    notice: Notice | None = None
    call: RepositoryCall | None = None

    @property
    def field_errors(self) -> dict[str, str]:
        return self.state.field_errors
