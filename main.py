"""
Achievement Portal - Main Application Entry Point

REST backend for apps, achievement lists, achievements, players and API keys.
"""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from portal import __version__
from portal.core.config import get_settings
from portal.core.exceptions import PortalError
from portal.core.logger import logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    settings = get_settings()
    logger.info(f"Starting Achievement Portal (debug={settings.DEBUG})")

    if settings.AUTO_CREATE_TABLES:
        from portal.infrastructure.local.database import init_db

        await init_db()

    yield

    logger.info("Shutting down Achievement Portal")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Achievement Portal",
        description="Define achievement lists for apps and track player progress",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(PortalError)
    async def portal_error_handler(request: Request, exc: PortalError):
        from portal.api.errors import to_http_exception

        http_exc = to_http_exception(exc)
        if http_exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=http_exc.status_code, content={"detail": http_exc.detail})

    from portal.api import achievements, api_keys, apps, lists, players

    app.include_router(apps.router, prefix="/api")
    app.include_router(lists.router, prefix="/api")
    app.include_router(achievements.router, prefix="/api")
    app.include_router(players.router, prefix="/api")
    app.include_router(api_keys.router, prefix="/api")

    storage_path = settings.STORAGE_BASE_PATH
    if not os.path.isabs(storage_path):
        storage_path = os.path.join(os.getcwd(), storage_path)

    os.makedirs(storage_path, exist_ok=True)
    app.mount("/storage", StaticFiles(directory=storage_path), name="storage")

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
