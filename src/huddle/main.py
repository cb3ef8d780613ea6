# src/huddle/main.py
"""Main entry point for the Huddle application shell.

Routers for the HTTP surface are mounted by the embedding application; this
module provides the configured app with middleware and domain error handling.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from huddle.api.errors import register_exception_handlers
from huddle.core.settings import settings

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Build the FastAPI application."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    application = FastAPI(
        title=f"{settings.app_name} API",
        description="Friendships, chats and messages",
        version=settings.app_version,
    )

    # Add CORS middleware
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    # Add GZip middleware for compression
    application.add_middleware(GZipMiddleware)

    register_exception_handlers(application)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint to verify the service is running."""
        return {"status": "ok"}

    @application.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint with basic information about the API."""
        return {
            "name": f"{settings.app_name} API",
            "version": settings.app_version,
            "docs": "/docs",
            "redoc": "/redoc",
        }

    logger.info("%s %s initialised", settings.app_name, settings.app_version)
    return application


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("huddle.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
