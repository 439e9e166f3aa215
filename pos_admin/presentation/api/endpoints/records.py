"""Generic master-data CRUD endpoints, one resource per entity schema.

Every response uses the ``{success, data, message}`` envelope, failures
included, so the form screens can show ``message`` as-is.
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse

from pos_admin.application.schemas import RecordListEnvelope, RecordMutationEnvelope
from pos_admin.application.services import RecordTableService, SchemaRegistry
from pos_admin.domain.entities import EntitySchema
from pos_admin.domain.exceptions import DuplicateEntityError, EntityNotFoundError
from pos_admin.infrastructure.dependencies import get_record_table_service, get_schema_registry

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Records"])


def _failure(status_code: int, message: str) -> JSONResponse:
    envelope = RecordMutationEnvelope(success=False, message=message)
    return JSONResponse(status_code=status_code, content=envelope.model_dump(exclude_none=True))


def _unknown_resource(resource: str) -> JSONResponse:
    return _failure(status.HTTP_404_NOT_FOUND, f"Unknown resource '{resource}'")


def _lookup(registry: SchemaRegistry, resource: str) -> EntitySchema | None:
    schema = registry.by_resource(resource)
    if schema is None:
        logger.info("Request for unknown resource '%s'", resource)
    return schema


@router.get("/{resource}", response_model=RecordListEnvelope)
async def list_records(
    resource: str,
    registry: SchemaRegistry = Depends(get_schema_registry),
    service: RecordTableService = Depends(get_record_table_service),
) -> RecordListEnvelope | JSONResponse:
    """Active records of a resource."""
    schema = _lookup(registry, resource)
    if schema is None:
        return _unknown_resource(resource)
    records = await service.list_records(schema)
    return RecordListEnvelope(
        success=True,
        data=records,
        message=f"{schema.display_title} loaded successfully",
    )


@router.post("/{resource}", response_model=RecordMutationEnvelope)
async def create_record(
    resource: str,
    body: dict[str, Any] = Body(...),
    registry: SchemaRegistry = Depends(get_schema_registry),
    service: RecordTableService = Depends(get_record_table_service),
) -> RecordMutationEnvelope | JSONResponse:
    schema = _lookup(registry, resource)
    if schema is None:
        return _unknown_resource(resource)
    try:
        record = await service.create_record(schema, body)
    except DuplicateEntityError as e:
        return _failure(status.HTTP_409_CONFLICT, str(e))
    return RecordMutationEnvelope(
        success=True,
        data=record,
        message=f"{schema.display_title} record created successfully",
    )


@router.put("/{resource}/{record_id}", response_model=RecordMutationEnvelope)
async def update_record(
    resource: str,
    record_id: str,
    body: dict[str, Any] = Body(...),
    registry: SchemaRegistry = Depends(get_schema_registry),
    service: RecordTableService = Depends(get_record_table_service),
) -> RecordMutationEnvelope | JSONResponse:
    schema = _lookup(registry, resource)
    if schema is None:
        return _unknown_resource(resource)
    try:
        record = await service.update_record(schema, record_id, body)
    except EntityNotFoundError as e:
        return _failure(status.HTTP_404_NOT_FOUND, str(e))
    except DuplicateEntityError as e:
        return _failure(status.HTTP_409_CONFLICT, str(e))
    return RecordMutationEnvelope(
        success=True,
        data=record,
        message=f"{schema.display_title} record updated successfully",
    )


@router.delete("/{resource}/{record_id}", response_model=RecordMutationEnvelope)
async def delete_record(
    resource: str,
    record_id: str,
    registry: SchemaRegistry = Depends(get_schema_registry),
    service: RecordTableService = Depends(get_record_table_service),
) -> RecordMutationEnvelope | JSONResponse:
    """Soft delete: the record is kept with ``ActiveStatus = 0``."""
    schema = _lookup(registry, resource)
    if schema is None:
        return _unknown_resource(resource)
    try:
        await service.delete_record(schema, record_id)
    except EntityNotFoundError as e:
        return _failure(status.HTTP_404_NOT_FOUND, str(e))
    return RecordMutationEnvelope(
        success=True,
        message=f"{schema.display_title} record deleted successfully",
    )
