"""
FastAPI application entry point
"""
from contextlib import asynccontextmanager
from typing import Awaitable, Callable

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.logger import logger, setup_logging
from app.api.v1.api import api_router
from app.middleware.request_id import RequestIdMiddleware
from app.services.container import Services, build_services


def create_app(services_factory: Callable[[], Awaitable[Services]] = build_services) -> FastAPI:
    """
    Build the app. Services are created once per process, on startup, and
    kept on ``app.state.services``.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging()
        services = await services_factory()
        app.state.services = services
        if services.reminders is not None:
            services.reminders.start()
        logger.info("%s API started", settings.APP_NAME)
        try:
            yield
        finally:
            if services.reminders is not None:
                services.reminders.shutdown()
            logger.info("%s API shutdown", settings.APP_NAME)

    app = FastAPI(
        title=settings.APP_NAME,
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
    )

    # ── Routers ───────────────────────────────────────────────────────────────
    app.include_router(api_router, prefix="/api/v1")

    # ── Request IDs ───────────────────────────────────────────────────────────
    app.add_middleware(RequestIdMiddleware)

    # ── CORS ──────────────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    @app.get("/")
    def read_root():
        return {"message": f"{settings.APP_NAME} API is running", "version": "0.1.0"}

    @app.get("/health")
    def health_check():
        return {"status": "healthy"}

    return app


app = create_app()
