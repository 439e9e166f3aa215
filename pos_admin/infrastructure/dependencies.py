"""Dependency wiring: infrastructure to application layer.

FastAPI providers for the mock backend, plus factories that assemble
form controllers for a screen against the configured REST backend.
"""

from collections.abc import AsyncGenerator, Callable
from functools import lru_cache

import httpx

from pos_admin.config import get_settings
from pos_admin.application.interfaces import RecordRepository
from pos_admin.application.services import (
    EntitySchemaLoader,
    FormController,
    RecordTableService,
    ReferenceDataService,
    SchemaRegistry,
)
from pos_admin.domain.entities import EntitySchema
from pos_admin.infrastructure.http import HttpRecordRepository
from pos_admin.infrastructure.storage import InMemoryRecordStore, load_seed_records


@lru_cache
def get_schema_registry() -> SchemaRegistry:
    """Entity schemas from ``settings.entity_schemas_file``, parsed once."""
    return EntitySchemaLoader(get_settings().entity_schemas_file).load()


@lru_cache
def get_record_store() -> InMemoryRecordStore:
    """Process-wide mock backend tables, seeded on first use."""
    return InMemoryRecordStore(load_seed_records(get_settings().seed_records_file))


async def get_record_table_service() -> AsyncGenerator[RecordTableService, None]:
    """Provides a RecordTableService over the shared in-memory store."""
    yield RecordTableService(get_record_store())


def build_repository(
    schema: EntitySchema,
    http_client: httpx.AsyncClient | None = None,
) -> RecordRepository:
    """REST repository for one entity type's resource."""
    settings = get_settings()
    return HttpRecordRepository(
        base_url=settings.api_base_url,
        resource=schema.resource,
        http_client=http_client,
        timeout=settings.request_timeout_seconds,
    )


def build_reference_data_service(
    registry: SchemaRegistry | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> ReferenceDataService:
    """Dropdown cache sharing one HTTP client across entity types."""
    settings = get_settings()
    return ReferenceDataService(
        registry if registry is not None else get_schema_registry(),
        lambda schema: build_repository(schema, http_client),
        ttl_seconds=settings.reference_cache_ttl_seconds,
    )


def build_form_controller(
    entity_type: str,
    *,
    http_client: httpx.AsyncClient | None = None,
    reference_data: ReferenceDataService | None = None,
    on_dirty_change: Callable[[bool], None] | None = None,
) -> FormController:
    """Controller for one screen, e.g. ``build_form_controller("item_departments")``."""
    registry = get_schema_registry()
    schema = registry[entity_type]
    return FormController(
        schema,
        build_repository(schema, http_client),
        reference_data=reference_data,
        notice_seconds=get_settings().notice_dismiss_seconds,
        on_dirty_change=on_dirty_change,
    )
