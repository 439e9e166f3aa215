"""FastAPI application factory for the development mock backend."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pos_admin.config import get_settings
from pos_admin.domain.exceptions import GENERIC_FAILURE_MESSAGE
from pos_admin.infrastructure.dependencies import get_record_store, get_schema_registry
from pos_admin.infrastructure.logging.log_config import setup_logging
from pos_admin.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: configure logging, load schemas, seed the store."""
    setup_logging()

    registry = get_schema_registry()
    store = get_record_store()
    for resource in registry.resources:
        records = await store.get_all(resource)
        logger.info("Serving /api/%s (%d seeded records)", resource, len(records))
    logger.info("Mock backend ready: %d entity schemas", len(registry))

    yield


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": GENERIC_FAILURE_MESSAGE},
    )


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(Exception, _unhandled_error)

    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "pos_admin.main:app",
        host=settings.mock_backend_host,
        port=settings.mock_backend_port,
        reload=settings.app_env == "development",
    )
