"""FastAPI application for the blog post API.

Endpoints:
- POST /posts - Create a post
- GET /posts - List posts (newest first)
- GET /posts/{post_id} - Get a post
- PUT /posts/{post_id} - Update title/subtitle/body
- POST /posts/{post_id}/likes - Add one like
- DELETE /posts/{post_id} - Delete a post
- GET /health - Database connectivity and API uptime

Requirements:
- DATABASE_URL must be set in environment unless a store is injected
- No authentication
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from api.routes import health as health_routes
from api.routes import posts as posts_routes
from core.persistence.errors import NotFound, StorageError, ValidationError
from core.persistence.interfaces import PostStore
from core.storage.postgres.config import PostgresConfig
from core.storage.postgres.stores import PostgresPostStore

logger = logging.getLogger(__name__)


def _error(status_code: int, error: str, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "message": message, **extra})


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def validation_error_handler(_request: Request, exc: ValidationError):
        return _error(400, "validation_error", str(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(_request: Request, exc: RequestValidationError):
        # Covers malformed bodies and non-UUID path ids.
        details = [
            {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", ""), "type": err.get("type", "")}
            for err in exc.errors()
        ]
        return _error(400, "validation_error", "Invalid request", details=details)

    @app.exception_handler(NotFound)
    async def not_found_handler(_request: Request, exc: NotFound):
        return _error(404, "not_found", str(exc))

    @app.exception_handler(StorageError)
    async def storage_error_handler(_request: Request, exc: StorageError):
        # Driver messages may carry connection details; keep them in the logs only.
        logger.error("Storage failure during %s", exc.operation or "request")
        return _error(500, "storage_error", "The storage backend failed to process the request")

    @app.exception_handler(Exception)
    async def global_exception_handler(_request: Request, exc: Exception):
        """Global exception handler to ensure consistent error responses."""
        logger.exception("Unhandled error: %s", type(exc).__name__)
        return _error(500, "internal_server_error", "An unexpected error occurred")


def create_app(store: PostStore | None = None) -> FastAPI:
    """Build the application.

    With an injected ``store`` the caller owns its lifecycle. Otherwise a
    PostgresPostStore is built from the environment at startup and disposed at
    shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if store is not None:
            app.state.post_store = store
            yield
            return

        owned = PostgresPostStore(config=PostgresConfig.from_env())
        app.state.post_store = owned
        logger.info("Post store initialized")
        try:
            yield
        finally:
            await owned.dispose()
            logger.info("Post store disposed")

    app = FastAPI(
        title="Blog API",
        description="CRUD API for blog posts backed by PostgreSQL",
        version="1.0.0",
        lifespan=lifespan,
    )
    if store is not None:
        # Available even when the lifespan is not run (plain TestClient calls).
        app.state.post_store = store

    app.include_router(posts_routes.router)
    app.include_router(health_routes.router)
    _register_exception_handlers(app)
    return app


app = create_app()
