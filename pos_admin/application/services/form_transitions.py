"""Pure state transitions for the Add/Edit/Delete/Search form lifecycle.

Every function takes the current ``ControllerState`` (plus the schema and the
cached record collection where needed) and returns a ``FormOutcome`` holding
the next state. Nothing here performs I/O: transitions that need the
repository describe the call in ``FormOutcome.call`` and the controller
executes it, then feeds the result back through the ``*_succeeded`` /
``*_failed`` functions.
"""

from collections.abc import Mapping, Sequence
from dataclasses import replace
from typing import Any

from pos_admin.application.services.field_validator import FieldValidator, coerce_input
from pos_admin.domain.entities import (
    ControllerState,
    EntitySchema,
    FieldValue,
    FormMode,
    FormOutcome,
    FormSignal,
    Notice,
    NoticeLevel,
    RepositoryCall,
    shape_record,
)
from pos_admin.domain.exceptions import GENERIC_FAILURE_MESSAGE

DEFAULT_NOTICE_SECONDS = 1.8

NO_CHANGE_MESSAGE = "No data has been modified."
SAVED_MESSAGE = "Record saved successfully."
DELETED_MESSAGE = "Record deleted successfully."
SUBMITTING_MESSAGE = "Please wait, the previous request is still in progress."


def _info(text: str, seconds: float) -> Notice:
    return Notice(NoticeLevel.INFO, text, auto_dismiss_seconds=seconds)


def _error(text: str | None) -> Notice:
    return Notice(NoticeLevel.ERROR, text or GENERIC_FAILURE_MESSAGE)


def initial_state(schema: EntitySchema) -> ControllerState:
    return ControllerState.initial(schema)


def reset(schema: EntitySchema) -> ControllerState:
    """Back to Add mode with a blank form."""
    return ControllerState.initial(schema)


def select_action(
    schema: EntitySchema,
    state: ControllerState,
    records: Sequence[Mapping[str, Any]],
    mode: FormMode,
    *,
    notice_seconds: float = DEFAULT_NOTICE_SECONDS,
) -> FormOutcome:
    """Switch to ``mode``. Non-Add modes need a record to be picked next."""
    if state.is_submitting:
        return FormOutcome(state, FormSignal.BUSY, _info(SUBMITTING_MESSAGE, notice_seconds))

    if mode == FormMode.ADD:
        return FormOutcome(reset(schema), FormSignal.MODE_CHANGED)

    if not records:
        return FormOutcome(
            state,
            FormSignal.NO_RECORDS_AVAILABLE,
            _info(f"No records available to {mode.verb}.", notice_seconds),
        )

    next_state = replace(
        state,
        mode=mode,
        selected_index=None,
        locked_fields=frozenset(),
        awaiting_delete_confirmation=False,
        field_errors={},
    )
    return FormOutcome(
        next_state,
        FormSignal.SELECTION_REQUIRED,
        Notice(NoticeLevel.INFO, f"Please select a record to {mode.verb}:"),
    )


def _locked_fields(schema: EntitySchema, mode: FormMode) -> frozenset[str]:
    if mode in (FormMode.SEARCH, FormMode.DELETE):
        return frozenset(schema.field_names)
    code_field = schema.business_code_field
    if mode == FormMode.EDIT and schema.code_lock_on_edit and code_field:
        return frozenset({code_field})
    return frozenset()


def select_record(
    schema: EntitySchema,
    state: ControllerState,
    records: Sequence[Mapping[str, Any]],
    index: int,
) -> FormOutcome:
    """Load ``records[index]`` into the form for the current mode."""
    if state.mode == FormMode.ADD:
        return FormOutcome(state, FormSignal.NOT_ALLOWED)
    if state.is_submitting:
        return FormOutcome(state, FormSignal.BUSY)
    if not 0 <= index < len(records):
        return FormOutcome(state, FormSignal.INVALID_SELECTION)

    form = shape_record(schema, records[index])
    is_delete = state.mode == FormMode.DELETE
    next_state = replace(
        state,
        current_form=form,
        loaded_form=dict(form),
        selected_index=index,
        is_dirty=False,
        field_errors={},
        locked_fields=_locked_fields(schema, state.mode),
        awaiting_delete_confirmation=is_delete,
    )
    if is_delete:
        return FormOutcome(
            next_state,
            FormSignal.CONFIRM_DELETE_REQUIRED,
            Notice(NoticeLevel.INFO, "Are you sure you want to delete this record?"),
        )
    return FormOutcome(next_state, FormSignal.RECORD_SELECTED)


def update_field(
    schema: EntitySchema,
    state: ControllerState,
    name: str,
    value: Any,
) -> FormOutcome:
    """Write one field. Raises ``KeyError`` for a field the schema does not declare."""
    spec = schema.get_field(name)
    if state.is_submitting:
        return FormOutcome(state, FormSignal.BUSY)
    if state.is_read_only or name in state.locked_fields:
        return FormOutcome(state, FormSignal.READ_ONLY)

    form = dict(state.current_form)
    form[name] = coerce_input(spec, value)
    errors = {k: v for k, v in state.field_errors.items() if k != name}
    return FormOutcome(
        replace(state, current_form=form, is_dirty=True, field_errors=errors),
        FormSignal.UPDATED,
    )


def validate(
    schema: EntitySchema,
    state: ControllerState,
    records: Sequence[Mapping[str, Any]],
) -> FormOutcome:
    errors = FieldValidator(schema).validate(state.current_form, records, state.selected_index)
    signal = FormSignal.VALIDATION_FAILED if errors else FormSignal.VALIDATED
    return FormOutcome(replace(state, field_errors=errors), signal)


def clear(schema: EntitySchema, state: ControllerState) -> FormOutcome:
    """Blank the form and drop the selection; the mode is kept."""
    if state.is_submitting:
        return FormOutcome(state, FormSignal.BUSY)
    blank = schema.blank_record()
    next_state = replace(
        state,
        current_form=blank,
        loaded_form=dict(blank),
        selected_index=None,
        is_dirty=False,
        field_errors={},
        locked_fields=frozenset(),
        awaiting_delete_confirmation=False,
    )
    return FormOutcome(next_state, FormSignal.CLEARED)


def has_real_changes(state: ControllerState) -> bool:
    return state.current_form != state.loaded_form


def primary_key_value(
    schema: EntitySchema,
    state: ControllerState,
    records: Sequence[Mapping[str, Any]],
) -> Any:
    """Primary key of the selected record as persisted (surrogate ids live only there)."""
    record = records[state.selected_index]
    if schema.primary_key in record:
        return record[schema.primary_key]
    return state.loaded_form.get(schema.primary_key)


def begin_submit(
    schema: EntitySchema,
    state: ControllerState,
    records: Sequence[Mapping[str, Any]],
    *,
    notice_seconds: float = DEFAULT_NOTICE_SECONDS,
) -> FormOutcome:
    """Decide what Save does; requests a create/update call when the form is ready."""
    if state.is_submitting:
        return FormOutcome(state, FormSignal.BUSY, _info(SUBMITTING_MESSAGE, notice_seconds))
    if state.mode in (FormMode.DELETE, FormMode.SEARCH):
        return FormOutcome(state, FormSignal.NOT_ALLOWED)
    if state.mode == FormMode.EDIT:
        if not state.has_selection or state.selected_index >= len(records):
            return FormOutcome(
                state,
                FormSignal.SELECTION_REQUIRED,
                Notice(NoticeLevel.INFO, "Please select a record to edit:"),
            )
        if not has_real_changes(state):
            return FormOutcome(state, FormSignal.NO_CHANGE, _info(NO_CHANGE_MESSAGE, notice_seconds))

    checked = validate(schema, state, records)
    if checked.signal == FormSignal.VALIDATION_FAILED:
        return checked

    payload: dict[str, FieldValue] = dict(checked.state.current_form)
    if state.mode == FormMode.ADD:
        call = RepositoryCall("create", payload=payload)
    else:
        call = RepositoryCall(
            "update",
            record_id=primary_key_value(schema, state, records),
            payload=payload,
        )
    return FormOutcome(replace(checked.state, is_submitting=True), FormSignal.VALIDATED, call=call)


def submit_succeeded(
    schema: EntitySchema, *, notice_seconds: float = DEFAULT_NOTICE_SECONDS
) -> FormOutcome:
    return FormOutcome(
        reset(schema),
        FormSignal.SAVED,
        Notice(NoticeLevel.SUCCESS, SAVED_MESSAGE, auto_dismiss_seconds=notice_seconds),
    )


def submit_failed(state: ControllerState, message: str | None) -> FormOutcome:
    """The entered data is kept so the user can retry without retyping."""
    return FormOutcome(
        replace(state, is_submitting=False),
        FormSignal.REPOSITORY_FAILURE,
        _error(message),
    )


def begin_delete(
    schema: EntitySchema,
    state: ControllerState,
    records: Sequence[Mapping[str, Any]],
    *,
    notice_seconds: float = DEFAULT_NOTICE_SECONDS,
) -> FormOutcome:
    if state.is_submitting:
        return FormOutcome(state, FormSignal.BUSY, _info(SUBMITTING_MESSAGE, notice_seconds))
    if (
        state.mode != FormMode.DELETE
        or not state.awaiting_delete_confirmation
        or not state.has_selection
        or state.selected_index >= len(records)
    ):
        return FormOutcome(state, FormSignal.NOT_ALLOWED)
    call = RepositoryCall("delete", record_id=primary_key_value(schema, state, records))
    return FormOutcome(replace(state, is_submitting=True), FormSignal.CONFIRM_DELETE_REQUIRED, call=call)


def delete_succeeded(
    schema: EntitySchema, *, notice_seconds: float = DEFAULT_NOTICE_SECONDS
) -> FormOutcome:
    return FormOutcome(
        reset(schema),
        FormSignal.DELETED,
        Notice(NoticeLevel.SUCCESS, DELETED_MESSAGE, auto_dismiss_seconds=notice_seconds),
    )


def delete_failed(state: ControllerState, message: str | None) -> FormOutcome:
    """Stays on the confirmation with the same selection."""
    return FormOutcome(
        replace(state, is_submitting=False),
        FormSignal.REPOSITORY_FAILURE,
        _error(message),
    )


def cancel_delete(schema: EntitySchema, state: ControllerState) -> FormOutcome:
    if not state.awaiting_delete_confirmation or state.is_submitting:
        return FormOutcome(state, FormSignal.NOT_ALLOWED)
    cleared = clear(schema, state).state
    return FormOutcome(
        cleared,
        FormSignal.SELECTION_REQUIRED,
        Notice(NoticeLevel.INFO, f"Please select a record to {FormMode.DELETE.verb}:"),
    )
