"""Reference data for dependent dropdowns (outlets for a table, property codes, ...).

Screens cross-reference other entity types: a table belongs to an outlet, a
designation to a department and a property. This service loads those
collections through their repositories, caches them for a short while, and
turns them into dropdown options. Versioned entity types only contribute
their currently applicable version of each code; inactive records are left
out.
"""

import logging
import time
from collections.abc import Callable, Mapping
from datetime import date, datetime
from typing import Any

from pos_admin.application.interfaces import RecordRepository
from pos_admin.application.services.temporal_resolver import TemporalResolver
from pos_admin.domain.entities import EntitySchema, SelectOption
from pos_admin.domain.entities.form_record import coerce_boolean
from pos_admin.domain.exceptions import RepositoryFailure

logger = logging.getLogger(__name__)

RepositoryFactory = Callable[[EntitySchema], RecordRepository]


def is_active_record(record: Mapping[str, Any]) -> bool:
    """Treat a record as active unless one of the usual inactive markers says otherwise."""
    if "inactive" in record and coerce_boolean(record["inactive"]):
        return False
    if "is_active" in record and record["is_active"] is not None and not coerce_boolean(record["is_active"]):
        return False
    if "ActiveStatus" in record and record["ActiveStatus"] is not None and not coerce_boolean(record["ActiveStatus"]):
        return False
    return True


class ReferenceDataService:
    """Loads and caches other entity types' records for dropdowns."""

    def __init__(
        self,
        schemas: Mapping[str, EntitySchema],
        repository_factory: RepositoryFactory,
        *,
        ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._schemas = schemas
        self._repository_factory = repository_factory
        self._ttl = ttl_seconds
        self._clock = clock
        self._repositories: dict[str, RecordRepository] = {}
        self._cache: dict[str, tuple[float, list[dict[str, Any]]]] = {}

    def _schema(self, entity_type: str) -> EntitySchema:
        try:
            return self._schemas[entity_type]
        except KeyError:
            raise KeyError(f"Unknown entity type '{entity_type}'") from None

    def _repository(self, schema: EntitySchema) -> RecordRepository:
        if schema.entity_type not in self._repositories:
            self._repositories[schema.entity_type] = self._repository_factory(schema)
        return self._repositories[schema.entity_type]

    async def load(self, entity_type: str, *, force: bool = False) -> list[dict[str, Any]]:
        """Records of ``entity_type``, served from cache while fresh.

        A failed load is logged and yields an empty list; it is not cached,
        so the next call tries again.
        """
        schema = self._schema(entity_type)
        now = self._clock()
        cached = self._cache.get(entity_type)
        if cached is not None and not force and now - cached[0] < self._ttl:
            logger.debug("Using cached %s: %d records", entity_type, len(cached[1]))
            return list(cached[1])

        try:
            records = await self._repository(schema).list_records()
        except RepositoryFailure as exc:
            logger.error("Failed to load %s for dropdowns: %s", entity_type, exc.message)
            return []

        self._cache[entity_type] = (now, list(records))
        logger.info("Loaded %d %s records", len(records), entity_type)
        return list(records)

    def invalidate(self, entity_type: str | None = None) -> None:
        """Drop one entity type's cache entry, or all of them."""
        if entity_type is None:
            self._cache.clear()
        else:
            self._cache.pop(entity_type, None)
        logger.debug("Reference cache cleared (%s)", entity_type or "all")

    def applicable_records(
        self,
        schema: EntitySchema,
        records: list[dict[str, Any]],
        reference_date: date | datetime | None = None,
    ) -> list[Mapping[str, Any]]:
        """Active records, reduced to the applicable version per code when versioned."""
        candidates: list[Mapping[str, Any]] = records
        if schema.is_versioned and schema.business_code_field:
            resolver = TemporalResolver(schema.business_code_field, schema.effective_from_field)
            candidates = resolver.resolve(records, reference_date)
        return [r for r in candidates if is_active_record(r)]

    async def options(
        self,
        entity_type: str,
        reference_date: date | datetime | None = None,
    ) -> list[SelectOption]:
        schema = self._schema(entity_type)
        records = await self.load(entity_type)
        code_field = schema.business_code_field or schema.primary_key
        label_field = schema.label_field

        options: list[SelectOption] = []
        for record in self.applicable_records(schema, records, reference_date):
            code = record.get(code_field)
            if code is None or str(code).strip() == "":
                continue
            name = str(record.get(label_field) or "").strip() if label_field else ""
            label = f"{code} - {name}" if name else str(code)
            options.append(SelectOption(value=str(code), label=label))
        return options

    async def field_options(
        self,
        schema: EntitySchema,
        field_name: str,
        reference_date: date | datetime | None = None,
    ) -> list[SelectOption]:
        """Options for a select field: static choices or another entity type's codes."""
        spec = schema.get_field(field_name)
        if spec.choices:
            return [SelectOption(value=c, label=c) for c in spec.choices]
        if spec.options_from:
            return await self.options(spec.options_from, reference_date)
        return []
