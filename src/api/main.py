"""
FastAPI application factory.

This module builds the JSON adapter around an EmailRegistry owned by the
process supervisor, and maps domain errors onto HTTP responses.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.api.v1 import router as v1_router
from src.domain.exceptions import InvalidRequest, StoreError
from src.domain.registry import EmailRegistry

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "Subscriber registry API v1 - Create, read, update, delete and list subscribers",
    },
]


async def invalid_request_handler(request: Request, exc: InvalidRequest) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": str(exc)},
    )


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    """Report any Store failure as a generic 500 without leaking its cause."""
    logger.error("JSON %s %s failed: %s", request.method, request.url.path, exc, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Store failure"},
    )


def create_app(registry: EmailRegistry) -> FastAPI:
    """
    Create the JSON API application.

    Args:
        registry: Registry service shared with the gRPC adapter

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="emaillist",
        description="Subscriber registry - JSON API",
        version="0.1.0",
        openapi_tags=tags_metadata,
    )
    app.state.registry = registry

    app.add_exception_handler(InvalidRequest, invalid_request_handler)
    app.add_exception_handler(StoreError, store_error_handler)

    app.include_router(v1_router, prefix="/v1")

    @app.get("/health")
    def health_check() -> dict[str, str]:
        """
        Health check endpoint with store validation.

        Returns 200 OK if the store answers a one-record page read.
        """
        registry.get_batch(0, 1)
        return {"status": "healthy"}

    return app
