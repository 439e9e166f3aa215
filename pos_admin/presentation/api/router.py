"""Top-level API router: health first, then the generic record resources."""

from fastapi import APIRouter

from pos_admin.presentation.api.endpoints.health import router as health_router
from pos_admin.presentation.api.endpoints.records import router as records_router

router = APIRouter(prefix="/api")
router.include_router(health_router)
router.include_router(records_router)
