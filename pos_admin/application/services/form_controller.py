"""Form controller: drives one master-data screen's Add/Edit/Delete/Search lifecycle.

The controller owns the screen's ``ControllerState`` and its cached record
collection. State changes come from the pure functions in
``form_transitions``; this class only adds the effect boundary: it executes
the repository calls those transitions request, refreshes the collection
after every mutation, and turns repository failures into outcomes instead of
letting them escape.
"""

import logging
from collections.abc import Callable, Sequence
from typing import Any

from pos_admin.application.interfaces import RecordRepository
from pos_admin.application.services import form_transitions as transitions
from pos_admin.application.services.reference_data_service import ReferenceDataService
from pos_admin.domain.entities import (
    ControllerState,
    EntitySchema,
    FormMode,
    FormOutcome,
    FormSignal,
    Notice,
    NoticeLevel,
    RepositoryCall,
)
from pos_admin.domain.exceptions import RepositoryFailure
from pos_admin.infrastructure.logging.colored_logger import FormActivityLogger, FormStage

logger = logging.getLogger(__name__)
flog = FormActivityLogger("FormController")

DirtyCallback = Callable[[bool], None]


class FormController:
    """Per-screen controller, parametrized by an ``EntitySchema``.

    Synchronous operations (``select_action``, ``select_record``,
    ``update_field``, ``validate``, ``clear``) run to completion against
    in-memory state. ``load``, ``submit`` and ``confirm_delete`` await the
    repository; while a save or delete is in flight, further saves, deletes,
    field edits and clears are refused with ``FormSignal.BUSY``. A failed call
    releases the guard on the live state, so nothing entered is lost. After
    ``close()`` any late response is discarded without touching state.
    """

    def __init__(
        self,
        schema: EntitySchema,
        repository: RecordRepository,
        *,
        reference_data: ReferenceDataService | None = None,
        notice_seconds: float = transitions.DEFAULT_NOTICE_SECONDS,
        on_dirty_change: DirtyCallback | None = None,
    ):
        self._schema = schema
        self._repository = repository
        self._reference_data = reference_data
        self._notice_seconds = notice_seconds
        self._on_dirty_change = on_dirty_change
        self._state = transitions.initial_state(schema)
        self._records: list[dict[str, Any]] = []
        self._closed = False

    # ── Read-only views ─────────────────────────────────────────────

    @property
    def schema(self) -> EntitySchema:
        return self._schema

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def records(self) -> Sequence[dict[str, Any]]:
        return tuple(self._records)

    @property
    def has_unsaved_changes(self) -> bool:
        """True when leaving the screen would lose edits."""
        return self._state.is_dirty and transitions.has_real_changes(self._state)

    @property
    def is_closed(self) -> bool:
        return self._closed

    # ── Collection ──────────────────────────────────────────────────

    async def load(self) -> FormOutcome:
        """Fetch the record collection (on mount, and after every mutation)."""
        try:
            with flog.timed_step(FormStage.LOAD, f"Loading {self._schema.entity_type}"):
                records = await self._repository.list_records()
        except RepositoryFailure as exc:
            if self._closed:
                return FormOutcome(self._state, FormSignal.DISCARDED)
            return FormOutcome(
                self._state,
                FormSignal.REPOSITORY_FAILURE,
                Notice(NoticeLevel.ERROR, exc.message),
            )
        if self._closed:
            return FormOutcome(self._state, FormSignal.DISCARDED)

        self._records = list(records)
        flog.detail("Collection cached", count=len(self._records))
        return FormOutcome(self._state, FormSignal.LOADED)

    refresh = load

    def close(self) -> None:
        """Screen unmount; responses still in flight will be dropped."""
        self._closed = True

    # ── Synchronous transitions ─────────────────────────────────────

    def select_action(self, mode: FormMode) -> FormOutcome:
        outcome = transitions.select_action(
            self._schema, self._state, self._records, mode, notice_seconds=self._notice_seconds
        )
        return self._apply(outcome)

    def select_record(self, index: int) -> FormOutcome:
        outcome = transitions.select_record(self._schema, self._state, self._records, index)
        if outcome.signal in (FormSignal.RECORD_SELECTED, FormSignal.CONFIRM_DELETE_REQUIRED):
            flog.step_start(FormStage.SELECT, f"{self._state.mode.value} record", index=index)
        return self._apply(outcome)

    def update_field(self, name: str, value: Any) -> FormOutcome:
        return self._apply(transitions.update_field(self._schema, self._state, name, value))

    def validate(self) -> dict[str, str]:
        outcome = self._apply(transitions.validate(self._schema, self._state, self._records))
        if outcome.field_errors:
            flog.step_start(
                FormStage.VALIDATE,
                "Validation failed",
                fields=",".join(outcome.field_errors),
            )
        return dict(outcome.field_errors)

    def clear(self) -> FormOutcome:
        return self._apply(transitions.clear(self._schema, self._state))

    def cancel_delete(self) -> FormOutcome:
        return self._apply(transitions.cancel_delete(self._schema, self._state))

    # ── Effects ─────────────────────────────────────────────────────

    async def submit(self) -> FormOutcome:
        """Save: create in Add mode, update in Edit mode."""
        outcome = transitions.begin_submit(
            self._schema, self._state, self._records, notice_seconds=self._notice_seconds
        )
        if outcome.call is None:
            return self._apply(outcome)

        self._apply(outcome)
        try:
            await self._execute(outcome.call, FormStage.SAVE)
        except RepositoryFailure as exc:
            if self._closed:
                return FormOutcome(self._state, FormSignal.DISCARDED)
            return self._apply(transitions.submit_failed(self._state, exc.message))
        if self._closed:
            return FormOutcome(self._state, FormSignal.DISCARDED)

        return await self._after_mutation(
            transitions.submit_succeeded(self._schema, notice_seconds=self._notice_seconds)
        )

    async def confirm_delete(self) -> FormOutcome:
        outcome = transitions.begin_delete(
            self._schema, self._state, self._records, notice_seconds=self._notice_seconds
        )
        if outcome.call is None:
            return self._apply(outcome)

        self._apply(outcome)
        try:
            await self._execute(outcome.call, FormStage.DELETE)
        except RepositoryFailure as exc:
            if self._closed:
                return FormOutcome(self._state, FormSignal.DISCARDED)
            return self._apply(transitions.delete_failed(self._state, exc.message))
        if self._closed:
            return FormOutcome(self._state, FormSignal.DISCARDED)

        return await self._after_mutation(
            transitions.delete_succeeded(self._schema, notice_seconds=self._notice_seconds)
        )

    async def _execute(self, call: RepositoryCall, stage: tuple[str, str, str]) -> None:
        entity = self._schema.entity_type
        if call.operation == "create":
            with flog.timed_step(stage, f"Creating {entity} record"):
                await self._repository.create(call.payload or {})
        elif call.operation == "update":
            with flog.timed_step(stage, f"Updating {entity} record", record_id=call.record_id):
                await self._repository.update(call.record_id, call.payload or {})
        elif call.operation == "delete":
            with flog.timed_step(stage, f"Deleting {entity} record", record_id=call.record_id):
                await self._repository.delete(call.record_id)
        else:
            raise ValueError(f"Unknown repository operation: {call.operation}")

    async def _after_mutation(self, outcome: FormOutcome) -> FormOutcome:
        """Reset to Add and refresh; a failed refresh keeps the previous cache."""
        if self._reference_data is not None:
            self._reference_data.invalidate(self._schema.entity_type)
        self._apply(outcome)
        refreshed = await self.load()
        if refreshed.signal == FormSignal.REPOSITORY_FAILURE:
            logger.warning(
                "Refresh of %s failed after a successful change: %s",
                self._schema.entity_type,
                refreshed.notice.text if refreshed.notice else "",
            )
        flog.step_complete(FormStage.COMPLETE, outcome.signal.value, entity=self._schema.entity_type)
        return outcome

    def _apply(self, outcome: FormOutcome) -> FormOutcome:
        was_dirty = self._state.is_dirty
        self._state = outcome.state
        if self._on_dirty_change is not None and was_dirty != outcome.state.is_dirty:
            self._on_dirty_change(outcome.state.is_dirty)
        return outcome
