"""Health check endpoint: lists the record resources the mock backend serves."""

from fastapi import APIRouter, Depends

from pos_admin.config import get_settings
from pos_admin.application.schemas import HealthResponse
from pos_admin.application.services import SchemaRegistry
from pos_admin.infrastructure.dependencies import get_schema_registry

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(
    registry: SchemaRegistry = Depends(get_schema_registry),
) -> HealthResponse:
    """Returns the current application health status."""
    settings = get_settings()
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        environment=settings.app_env,
        resources=registry.resources,
    )
