"""Application service (use case) behind the mock backend's generic record endpoints."""

import logging
from typing import Any

from pos_admin.application.interfaces import RecordStore
from pos_admin.domain.dates import parse_effective_date
from pos_admin.domain.entities import EntitySchema
from pos_admin.domain.exceptions import DuplicateEntityError, EntityNotFoundError

logger = logging.getLogger(__name__)

ACTIVE_STATUS_FIELD = "ActiveStatus"


def _is_live(record: dict[str, Any]) -> bool:
    return record.get(ACTIVE_STATUS_FIELD, 1) not in (0, "0", False)


class RecordTableService:
    """CRUD over one store table per entity schema. Depends on the store port (DI).

    Deletes are soft: the record keeps its row with ``ActiveStatus = 0`` and
    disappears from listings.
    """

    def __init__(self, store: RecordStore):
        self._store = store

    async def list_records(self, schema: EntitySchema) -> list[dict[str, Any]]:
        records = await self._store.get_all(schema.resource)
        return [r for r in records if _is_live(r)]

    async def create_record(self, schema: EntitySchema, body: dict[str, Any]) -> dict[str, Any]:
        record = {k: v for k, v in body.items() if k != schema.primary_key or schema.has_field(k)}
        await self._ensure_unique(schema, record, exclude_key=None)
        if not schema.has_field(schema.primary_key):
            surrogate = await self._store.next_id(schema.resource, schema.primary_key)
            record = {schema.primary_key: surrogate, **record}
        record[ACTIVE_STATUS_FIELD] = 1
        stored = await self._store.insert(schema.resource, record)
        logger.info("Created %s %s", schema.entity_type, stored.get(schema.primary_key))
        return stored

    async def update_record(
        self, schema: EntitySchema, record_id: str, body: dict[str, Any]
    ) -> dict[str, Any]:
        existing = await self._get_live(schema, record_id)
        merged = {**existing, **{k: v for k, v in body.items() if k != schema.primary_key}}
        if schema.has_field(schema.primary_key) and schema.primary_key in body:
            merged[schema.primary_key] = body[schema.primary_key]
        await self._ensure_unique(schema, merged, exclude_key=str(existing[schema.primary_key]))
        updated = await self._store.replace(schema.resource, schema.primary_key, record_id, merged)
        if updated is None:
            raise EntityNotFoundError(schema.display_title, record_id)
        logger.info("Updated %s %s", schema.entity_type, record_id)
        return updated

    async def delete_record(self, schema: EntitySchema, record_id: str) -> None:
        existing = await self._get_live(schema, record_id)
        await self._store.replace(
            schema.resource,
            schema.primary_key,
            record_id,
            {**existing, ACTIVE_STATUS_FIELD: 0},
        )
        logger.info("Soft-deleted %s %s", schema.entity_type, record_id)

    async def _get_live(self, schema: EntitySchema, record_id: str) -> dict[str, Any]:
        record = await self._store.get_by_key(schema.resource, schema.primary_key, record_id)
        if record is None or not _is_live(record):
            raise EntityNotFoundError(schema.display_title, record_id)
        return record

    async def _ensure_unique(
        self, schema: EntitySchema, record: dict[str, Any], exclude_key: str | None
    ) -> None:
        """Reject a second live record with the same natural key.

        The natural key is the business code, plus the effective date for
        versioned entities (several versions of one code may coexist).
        """
        code_field = schema.business_code_field
        if not code_field or record.get(code_field) in (None, ""):
            return
        key = self._natural_key(schema, record)
        for other in await self.list_records(schema):
            if exclude_key is not None and str(other.get(schema.primary_key)) == exclude_key:
                continue
            if self._natural_key(schema, other) == key:
                value = str(record.get(code_field))
                if schema.is_versioned:
                    value = f"{value}@{record.get(schema.effective_from_field)}"
                raise DuplicateEntityError(schema.display_title, code_field, value)

    @staticmethod
    def _natural_key(schema: EntitySchema, record: dict[str, Any]) -> tuple[Any, ...]:
        code = str(record.get(schema.business_code_field) or "").strip().lower()
        if schema.is_versioned:
            return (code, parse_effective_date(record.get(schema.effective_from_field)))
        return (code,)
