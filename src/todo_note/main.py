from __future__ import annotations

import logging
import math
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .context import AppContext
from .errors import StoreError
from .routers import prefs as prefs_router
from .routers import todos as todos_router
from .routers import window as window_router
from .settings import Settings, get_settings
from .window import WindowController

logger = logging.getLogger(__name__)

def _json_float(value: float):
    # Rejected inputs may be NaN/inf, which JSON cannot carry.
    return value if math.isfinite(value) else str(value)


openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "todos", "description": "Ordered todo list: CRUD, reordering and the one-time legacy import."},
    {"name": "prefs", "description": "Persisted window and UI preferences."},
    {"name": "window", "description": "Panel mode, pinning and window move/resize notifications."},
]


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None, window: Optional[WindowController] = None) -> FastAPI:
    """
    Build the FastAPI app around a freshly opened store.

    The store is opened (and its schema migrated) here, so a broken database
    fails app creation instead of the first request. It is closed when the
    app shuts down.
    """
    settings = settings or get_settings()
    context = AppContext.open(settings, window=window)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        context.close()

    app = FastAPI(
        title="Simple Todo Note",
        description="Local single-writer store for an ordered todo list and its window/UI preferences.",
        version="0.1.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )
    app.state.context = context

    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Return a consistent JSON structure for request validation errors.

        Response format:
            {
                "error": "ValidationError",
                "detail": [... pydantic/fastapi error details ...],
                "message": "Request validation failed"
            }
        """
        return JSONResponse(
            status_code=422,
            content={
                "error": "ValidationError",
                "message": "Request validation failed",
                "detail": jsonable_encoder(exc.errors(), custom_encoder={float: _json_float}),
            },
        )

    @app.exception_handler(StoreError)
    async def store_exception_handler(request: Request, exc: StoreError) -> JSONResponse:
        """
        Render every store failure as {"error": <class name>, "message": <text>}.
        """
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": type(exc).__name__, "message": exc.message},
        )

    # PUBLIC_INTERFACE
    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health and the schema version.
        """
        return {"message": "Healthy", "schemaVersion": context.schema_version}

    app.include_router(todos_router.router)
    app.include_router(prefs_router.router)
    app.include_router(window_router.router)
    return app
