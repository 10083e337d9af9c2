"""
Semantic Search Application Entry Point

This module defines the FastAPI application instance, registers all routers,
configures global exception handling, and provides a test-friendly application
factory.

Startup order
-------------
1. Load the configuration snapshot and make sure the model is deployed.
2. Build the helper, which registers the index template rewrite rules and
   the query parser filter.
3. Build the searcher.
"""

from __future__ import annotations

import logging
from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool

from .core.errors import unhandled_exception_handler
from .api import admin_routes, health_routes, search_routes
from .api.dependencies import get_config_store, get_helper, get_searcher


logger = logging.getLogger("semantic.app")


# ---------------------------------------------------------------------
# Application Factory (Test-Friendly)
# ---------------------------------------------------------------------

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns
    -------
    FastAPI
        Fully configured FastAPI application.
    """
    app = FastAPI(
        title="semantic-search",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # --------------------------------------------------------------
    # Global Exception Handling
    # --------------------------------------------------------------

    app.add_exception_handler(Exception, unhandled_exception_handler)

    # --------------------------------------------------------------
    # Router Registration
    # --------------------------------------------------------------

    app.include_router(health_routes.router)
    app.include_router(search_routes.router)
    app.include_router(admin_routes.router)

    # --------------------------------------------------------------
    # Startup Hook
    # --------------------------------------------------------------

    @app.on_event("startup")
    async def _startup() -> None:
        """
        Load configuration and wire the semantic search components.

        Model polling blocks, so it runs on the threadpool.
        """
        logger.info("Starting semantic-search")

        snapshot = await run_in_threadpool(get_config_store().load)
        get_helper()
        get_searcher()

        if snapshot.neural_enabled:
            logger.info(
                "Neural search enabled: model=%s field=%s",
                snapshot.model_id,
                snapshot.vector_field,
            )
        else:
            logger.info("Neural search disabled; serving lexical queries only.")

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        logger.info("Shutting down semantic-search")

    return app


# ---------------------------------------------------------------------
# Default Application Instance (for Uvicorn/Gunicorn)
# ---------------------------------------------------------------------

app = create_app()
