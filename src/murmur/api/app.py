"""FastAPI application factory for murmur.

Creates the application with:
- Post and search routers (enabled per service role by the runtime)
- Health probes
- Lifecycle management for the database, cache and event bus connections
- Consistent {"success": false, "message": ...} error bodies
- ORJSON for fast JSON serialization
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import cast

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from starlette.types import ExceptionHandler

from murmur.api.errors import (
    ApiError,
    api_exception_handler,
    generic_exception_handler,
    validation_exception_handler,
)
from murmur.api.middleware import CorrelationMiddleware
from murmur.api.routers import health, posts, search
from murmur.config import Settings, settings
from murmur.observability import configure_logging
from murmur.runtime import Runtime

logger = logging.getLogger(__name__)


def _make_lifespan(config: Settings):  # type: ignore[no-untyped-def]
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Manage application lifecycle.

        An injected runtime is owned by the caller and left untouched.
        Otherwise one is built from settings, started, and closed on
        shutdown.
        """
        json_format = config.log_json if config.log_json is not None else config.env != "dev"
        configure_logging(json_format=json_format, level=config.log_level)

        if getattr(app.state, "runtime", None) is not None:
            yield
            return

        logger.info("Starting murmur (%s, role=%s)", config.env, config.service_role)
        runtime = Runtime.from_settings(config)
        await runtime.start()
        app.state.runtime = runtime
        logger.info("murmur startup complete")

        try:
            yield
        finally:
            logger.info("Shutting down murmur")
            await runtime.close()
            app.state.runtime = None
            logger.info("murmur shutdown complete")

    return lifespan


def create_app(runtime: Runtime | None = None, config: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        runtime: Prebuilt runtime (tests); built at startup when omitted
        config: Settings; defaults to the process settings
    """
    config = config or (runtime.settings if runtime is not None else settings)

    app = FastAPI(
        title="murmur",
        description="Post and search services with cache-aside reads and event propagation",
        version="0.1.0",
        default_response_class=ORJSONResponse,
        lifespan=_make_lifespan(config),
    )
    app.state.runtime = runtime

    app.add_middleware(CorrelationMiddleware)

    # Register exception handlers
    app.add_exception_handler(ApiError, cast(ExceptionHandler, api_exception_handler))
    app.add_exception_handler(
        RequestValidationError, cast(ExceptionHandler, validation_exception_handler)
    )
    app.add_exception_handler(Exception, cast(ExceptionHandler, generic_exception_handler))

    # Include routers
    app.include_router(health.router)
    app.include_router(posts.router)
    app.include_router(search.router)

    return app
