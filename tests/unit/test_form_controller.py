"""Unit tests for the FormController lifecycle."""

import asyncio
from typing import Any

import pytest
import pytest_asyncio

from pos_admin.application.interfaces import RecordRepository
from pos_admin.application.services import FormController, ReferenceDataService
from pos_admin.domain.entities import (
    ControllerState,
    EntitySchema,
    FieldKind,
    FieldSpec,
    FormMode,
    FormSignal,
    NoticeLevel,
)
from pos_admin.domain.exceptions import DuplicateKeyViolation, RepositoryFailure

DEPARTMENTS = EntitySchema(
    entity_type="item_departments",
    resource="item-departments",
    primary_key="id",
    code_field="department_code",
    label_field="name",
    fields=(
        FieldSpec("department_code", "Department Code", required=True, max_length=4, uppercase=True,
                  truncate=True, unique_among_existing=True, unique_case_insensitive=True),
        FieldSpec("name", "Department Name", required=True, max_length=20),
        FieldSpec("alternate_name", "Alternate Name", max_length=20),
        FieldSpec("inactive", "Inactive", kind=FieldKind.BOOLEAN),
    ),
)


def _row(record_id: int, code: str, name: str) -> dict[str, Any]:
    return {
        "id": record_id,
        "department_code": code,
        "name": name,
        "alternate_name": "",
        "inactive": False,
        "ActiveStatus": 1,
    }


class FakeRecordRepository(RecordRepository):
    """In-memory fake repository that records every call."""

    def __init__(self, records: list[dict[str, Any]] | None = None):
        self.records = [dict(r) for r in records or []]
        self.calls: list[tuple] = []
        self.list_calls = 0
        self.fail_with: RepositoryFailure | None = None
        self.fail_list_with: RepositoryFailure | None = None
        self.gate: asyncio.Event | None = None
        self._next_id = 100

    async def list_records(self) -> list[dict[str, Any]]:
        self.list_calls += 1
        if self.fail_list_with is not None:
            raise self.fail_list_with
        return [dict(r) for r in self.records]

    async def _mutate(self, call: tuple) -> None:
        self.calls.append(call)
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise self.fail_with

    async def create(self, record: dict[str, Any]) -> dict[str, Any] | None:
        await self._mutate(("create", dict(record)))
        stored = {"id": self._next_id, **record}
        self._next_id += 1
        self.records.append(stored)
        return stored

    async def update(self, record_id: Any, record: dict[str, Any]) -> None:
        await self._mutate(("update", record_id, dict(record)))
        for index, existing in enumerate(self.records):
            if existing["id"] == record_id:
                self.records[index] = {**existing, **record}

    async def delete(self, record_id: Any) -> None:
        await self._mutate(("delete", record_id))
        self.records = [r for r in self.records if r["id"] != record_id]


FIVE_ROWS = [
    _row(1, "FOOD", "Food"),
    _row(2, "BEV", "Beverages"),
    _row(3, "LIQ", "Liquor"),
    _row(4, "TOB", "Tobacco"),
    _row(5, "MISC", "Miscellaneous"),
]


@pytest.fixture
def repository() -> FakeRecordRepository:
    return FakeRecordRepository(FIVE_ROWS)


@pytest_asyncio.fixture
async def controller(repository: FakeRecordRepository) -> FormController:
    controller = FormController(DEPARTMENTS, repository)
    await controller.load()
    return controller


def _initial() -> ControllerState:
    return ControllerState.initial(DEPARTMENTS)


# ── Loading and mode selection ──


def test_starts_in_add_mode_with_blank_form(repository):
    controller = FormController(DEPARTMENTS, repository)

    assert controller.state == _initial()
    assert controller.state.mode == FormMode.ADD
    assert controller.state.current_form == {
        "department_code": "",
        "name": "",
        "alternate_name": "",
        "inactive": False,
    }


@pytest.mark.asyncio
async def test_load_caches_collection(controller: FormController):
    assert len(controller.records) == 5


@pytest.mark.asyncio
async def test_load_failure_is_reported_not_raised(repository):
    repository.fail_list_with = RepositoryFailure("Database offline")
    controller = FormController(DEPARTMENTS, repository)

    outcome = await controller.load()

    assert outcome.signal == FormSignal.REPOSITORY_FAILURE
    assert outcome.notice.text == "Database offline"
    assert outcome.notice.level == NoticeLevel.ERROR


@pytest.mark.parametrize("mode, verb", [(FormMode.EDIT, "edit"), (FormMode.DELETE, "delete"), (FormMode.SEARCH, "view")])
def test_non_add_mode_on_empty_collection_signals_no_records(mode, verb):
    controller = FormController(DEPARTMENTS, FakeRecordRepository())

    outcome = controller.select_action(mode)

    assert outcome.signal == FormSignal.NO_RECORDS_AVAILABLE
    assert outcome.notice.text == f"No records available to {verb}."
    assert controller.state == _initial()


@pytest.mark.asyncio
async def test_edit_mode_requests_a_selection(controller: FormController):
    outcome = controller.select_action(FormMode.EDIT)

    assert outcome.signal == FormSignal.SELECTION_REQUIRED
    assert outcome.notice.text == "Please select a record to edit:"
    assert controller.state.mode == FormMode.EDIT
    assert controller.state.selected_index is None


@pytest.mark.asyncio
async def test_select_record_outside_collection_is_invalid(controller: FormController):
    controller.select_action(FormMode.EDIT)

    assert controller.select_record(5).signal == FormSignal.INVALID_SELECTION
    assert controller.select_record(-1).signal == FormSignal.INVALID_SELECTION


@pytest.mark.asyncio
async def test_select_record_not_allowed_in_add_mode(controller: FormController):
    assert controller.select_record(0).signal == FormSignal.NOT_ALLOWED


# ── Editing ──


@pytest.mark.asyncio
async def test_select_record_loads_form_and_locks_code(controller: FormController):
    controller.select_action(FormMode.EDIT)

    outcome = controller.select_record(1)

    assert outcome.signal == FormSignal.RECORD_SELECTED
    state = controller.state
    assert state.selected_index == 1
    assert state.current_form == {
        "department_code": "BEV",
        "name": "Beverages",
        "alternate_name": "",
        "inactive": False,
    }
    assert state.is_dirty is False
    assert state.field_errors == {}
    assert controller.update_field("department_code", "XXX").signal == FormSignal.READ_ONLY
    assert controller.state.current_form["department_code"] == "BEV"


@pytest.mark.asyncio
async def test_update_field_coerces_and_marks_dirty(controller: FormController):
    outcome = controller.update_field("department_code", "bar-123")

    assert outcome.signal == FormSignal.UPDATED
    assert controller.state.current_form["department_code"] == "BAR-"
    assert controller.state.is_dirty is True

    controller.update_field("inactive", "true")
    assert controller.state.current_form["inactive"] is True


@pytest.mark.asyncio
async def test_update_field_clears_only_that_fields_error(controller: FormController):
    assert controller.validate() == {
        "department_code": "Department Code is required",
        "name": "Department Name is required",
    }

    controller.update_field("name", "Bakery")

    assert controller.state.field_errors == {"department_code": "Department Code is required"}


@pytest.mark.asyncio
async def test_update_field_rejects_unknown_field(controller: FormController):
    with pytest.raises(KeyError):
        controller.update_field("colour", "red")


@pytest.mark.asyncio
async def test_edit_without_changes_is_no_change(controller: FormController, repository):
    controller.select_action(FormMode.EDIT)
    controller.select_record(2)

    outcome = await controller.submit()

    assert outcome.signal == FormSignal.NO_CHANGE
    assert outcome.notice.text == "No data has been modified."
    assert outcome.notice.auto_dismiss_seconds == 1.8
    assert repository.calls == []


@pytest.mark.asyncio
async def test_edit_changed_back_to_original_is_no_change(controller: FormController, repository):
    controller.select_action(FormMode.EDIT)
    controller.select_record(2)
    controller.update_field("name", "Spirits")
    controller.update_field("name", "Liquor")

    assert controller.state.is_dirty is True
    assert controller.has_unsaved_changes is False
    assert (await controller.submit()).signal == FormSignal.NO_CHANGE
    assert repository.calls == []


@pytest.mark.asyncio
async def test_edit_submit_updates_by_surrogate_key_and_resets(controller: FormController, repository):
    controller.select_action(FormMode.EDIT)
    controller.select_record(2)
    controller.update_field("name", "Spirits")

    outcome = await controller.submit()

    assert outcome.signal == FormSignal.SAVED
    assert outcome.notice.level == NoticeLevel.SUCCESS
    assert repository.calls == [
        ("update", 3, {"department_code": "LIQ", "name": "Spirits", "alternate_name": "", "inactive": False})
    ]
    assert controller.state == _initial()
    assert controller.records[2]["name"] == "Spirits"


@pytest.mark.asyncio
async def test_edit_submit_without_selection_asks_for_one(controller: FormController, repository):
    controller.select_action(FormMode.EDIT)

    outcome = await controller.submit()

    assert outcome.signal == FormSignal.SELECTION_REQUIRED
    assert repository.calls == []


# ── Adding ──


@pytest.mark.asyncio
async def test_add_submit_creates_with_entered_fields_and_resets(controller: FormController, repository):
    controller.update_field("department_code", "bar")
    controller.update_field("name", "Bar")

    outcome = await controller.submit()

    assert outcome.signal == FormSignal.SAVED
    assert repository.calls == [
        ("create", {"department_code": "BAR", "name": "Bar", "alternate_name": "", "inactive": False})
    ]
    assert controller.state == ControllerState(
        mode=FormMode.ADD,
        current_form=DEPARTMENTS.blank_record(),
        loaded_form=DEPARTMENTS.blank_record(),
    )
    assert len(controller.records) == 6
    assert repository.list_calls == 2


@pytest.mark.asyncio
async def test_add_with_errors_does_not_call_repository(controller: FormController, repository):
    controller.update_field("department_code", "food")

    outcome = await controller.submit()

    assert outcome.signal == FormSignal.VALIDATION_FAILED
    assert outcome.field_errors == {
        "department_code": "Department Code already exists",
        "name": "Department Name is required",
    }
    assert controller.state.field_errors == outcome.field_errors
    assert repository.calls == []


@pytest.mark.asyncio
async def test_submit_failure_keeps_entered_data(controller: FormController, repository):
    repository.fail_with = DuplicateKeyViolation("Department code already exists")
    controller.update_field("department_code", "BAR")
    controller.update_field("name", "Bar")
    entered = dict(controller.state.current_form)

    outcome = await controller.submit()

    assert outcome.signal == FormSignal.REPOSITORY_FAILURE
    assert outcome.notice.text == "Department code already exists"
    assert outcome.notice.auto_dismiss_seconds is None
    assert controller.state.current_form == entered
    assert controller.state.mode == FormMode.ADD
    assert controller.state.is_submitting is False


@pytest.mark.asyncio
async def test_submit_failure_without_message_uses_generic_text(controller: FormController, repository):
    repository.fail_with = RepositoryFailure()
    controller.update_field("department_code", "BAR")
    controller.update_field("name", "Bar")

    outcome = await controller.submit()

    assert outcome.notice.text == "Operation failed"


@pytest.mark.asyncio
async def test_refresh_failure_after_save_still_reports_saved(controller: FormController, repository):
    controller.update_field("department_code", "BAR")
    controller.update_field("name", "Bar")
    repository.fail_list_with = RepositoryFailure("Timeout")

    outcome = await controller.submit()

    assert outcome.signal == FormSignal.SAVED
    assert len(controller.records) == 5


# ── Deleting ──


@pytest.mark.asyncio
async def test_delete_flow_calls_delete_once_with_selected_key(controller: FormController, repository):
    controller.select_action(FormMode.DELETE)

    selected = controller.select_record(2)
    assert selected.signal == FormSignal.CONFIRM_DELETE_REQUIRED
    assert controller.state.awaiting_delete_confirmation is True
    assert controller.update_field("name", "x").signal == FormSignal.READ_ONLY

    outcome = await controller.confirm_delete()

    assert outcome.signal == FormSignal.DELETED
    assert repository.calls == [("delete", 3)]
    assert controller.state == _initial()
    assert [r["id"] for r in controller.records] == [1, 2, 4, 5]


@pytest.mark.asyncio
async def test_delete_failure_stays_on_confirmation(controller: FormController, repository):
    repository.fail_with = RepositoryFailure("Department is used by item categories")
    controller.select_action(FormMode.DELETE)
    controller.select_record(2)

    outcome = await controller.confirm_delete()

    assert outcome.signal == FormSignal.REPOSITORY_FAILURE
    assert outcome.notice.text == "Department is used by item categories"
    assert repository.calls == [("delete", 3)]
    state = controller.state
    assert state.mode == FormMode.DELETE
    assert state.awaiting_delete_confirmation is True
    assert state.selected_index == 2
    assert state.current_form["department_code"] == "LIQ"


@pytest.mark.asyncio
async def test_cancel_delete_returns_to_selection(controller: FormController, repository):
    controller.select_action(FormMode.DELETE)
    controller.select_record(0)

    outcome = controller.cancel_delete()

    assert outcome.signal == FormSignal.SELECTION_REQUIRED
    assert controller.state.mode == FormMode.DELETE
    assert controller.state.selected_index is None
    assert (await controller.confirm_delete()).signal == FormSignal.NOT_ALLOWED
    assert repository.calls == []


# ── Search and clear ──


@pytest.mark.asyncio
async def test_search_mode_is_read_only(controller: FormController, repository):
    controller.select_action(FormMode.SEARCH)
    controller.select_record(0)

    assert controller.update_field("name", "Changed").signal == FormSignal.READ_ONLY
    assert (await controller.submit()).signal == FormSignal.NOT_ALLOWED
    assert repository.calls == []


@pytest.mark.asyncio
async def test_clear_is_idempotent_and_keeps_mode(controller: FormController):
    controller.select_action(FormMode.EDIT)
    controller.select_record(0)
    controller.update_field("name", "Changed")

    controller.clear()
    first = controller.state
    controller.clear()

    assert controller.state == first
    assert first.mode == FormMode.EDIT
    assert first.selected_index is None
    assert first.is_dirty is False
    assert first.current_form == DEPARTMENTS.blank_record()


@pytest.mark.asyncio
async def test_add_action_resets_everything(controller: FormController):
    controller.select_action(FormMode.EDIT)
    controller.select_record(0)

    outcome = controller.select_action(FormMode.ADD)

    assert outcome.signal == FormSignal.MODE_CHANGED
    assert controller.state == _initial()


# ── In-flight requests ──


@pytest.mark.asyncio
async def test_second_submit_while_in_flight_is_busy(controller: FormController, repository):
    repository.gate = asyncio.Event()
    controller.update_field("department_code", "BAR")
    controller.update_field("name", "Bar")

    first = asyncio.create_task(controller.submit())
    await asyncio.sleep(0)

    assert controller.state.is_submitting is True
    assert (await controller.submit()).signal == FormSignal.BUSY
    assert controller.select_action(FormMode.EDIT).signal == FormSignal.BUSY

    repository.gate.set()
    assert (await first).signal == FormSignal.SAVED
    assert len(repository.calls) == 1


@pytest.mark.asyncio
async def test_edits_while_in_flight_are_refused_and_failure_keeps_form(
    controller: FormController, repository
):
    repository.gate = asyncio.Event()
    repository.fail_with = RepositoryFailure("Database offline")
    controller.update_field("department_code", "BAR")
    controller.update_field("name", "Bar")

    pending = asyncio.create_task(controller.submit())
    await asyncio.sleep(0)

    assert controller.update_field("alternate_name", "typed while saving").signal == FormSignal.BUSY
    assert controller.clear().signal == FormSignal.BUSY

    repository.gate.set()
    outcome = await pending

    assert outcome.signal == FormSignal.REPOSITORY_FAILURE
    assert controller.state.is_submitting is False
    assert controller.state.current_form["department_code"] == "BAR"
    assert controller.state.current_form["name"] == "Bar"
    assert controller.update_field("alternate_name", "after retry").signal == FormSignal.UPDATED


@pytest.mark.asyncio
async def test_failed_update_stays_on_selected_record(controller: FormController, repository):
    controller.select_action(FormMode.EDIT)
    controller.select_record(2)
    controller.update_field("name", "Spirits")
    repository.gate = asyncio.Event()
    repository.fail_with = RepositoryFailure("Database offline")

    pending = asyncio.create_task(controller.submit())
    await asyncio.sleep(0)
    repository.gate.set()
    await pending

    assert controller.state.mode == FormMode.EDIT
    assert controller.state.selected_index == 2
    assert controller.state.current_form["name"] == "Spirits"
    assert controller.has_unsaved_changes


@pytest.mark.asyncio
async def test_response_after_close_is_discarded(controller: FormController, repository):
    repository.gate = asyncio.Event()
    controller.update_field("department_code", "BAR")
    controller.update_field("name", "Bar")

    pending = asyncio.create_task(controller.submit())
    await asyncio.sleep(0)
    controller.close()
    repository.gate.set()
    outcome = await pending

    assert outcome.signal == FormSignal.DISCARDED
    assert controller.is_closed
    assert repository.list_calls == 1
    assert controller.state.current_form["department_code"] == "BAR"


# ── Collaborators ──


@pytest.mark.asyncio
async def test_dirty_callback_fires_on_transitions(repository):
    seen: list[bool] = []
    controller = FormController(DEPARTMENTS, repository, on_dirty_change=seen.append)
    await controller.load()

    controller.update_field("department_code", "BAR")
    controller.update_field("name", "Bar")
    await controller.submit()

    assert seen == [True, False]


@pytest.mark.asyncio
async def test_successful_save_invalidates_reference_data(repository):
    reference_data = ReferenceDataService({DEPARTMENTS.entity_type: DEPARTMENTS}, lambda schema: repository)
    controller = FormController(DEPARTMENTS, repository, reference_data=reference_data)
    await controller.load()
    options = await reference_data.options("item_departments")
    assert len(options) == 5

    controller.update_field("department_code", "BAR")
    controller.update_field("name", "Bar")
    await controller.submit()

    options = await reference_data.options("item_departments")
    assert [o.label for o in options][-1] == "BAR - Bar"
