"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from price_analyzer.config import settings
from price_analyzer.db import close_db, init_db
from price_analyzer.routers import analysis, health
from price_analyzer.services.container import ServiceContainer, build_services
from price_analyzer.utils.errors import PriceAnalyzerError
from price_analyzer.utils.logging_config import RequestLoggingMiddleware, setup_logging

logger = logging.getLogger(__name__)


def create_app(services: Optional[ServiceContainer] = None) -> FastAPI:
    """Build the application. A prebuilt container skips logging and database setup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if services is not None:
            app.state.services = services
            yield
            return

        setup_logging()
        logger.info("Starting application")

        # Fails fast on missing credentials before the database is touched
        app.state.services = build_services()
        await init_db()

        yield
        provider = app.state.services.embeddings.provider
        if hasattr(provider, "aclose"):
            await provider.aclose()
        await close_db()
        logger.info("Shutting down application")

    app = FastAPI(title="Price Analyzer", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    @app.exception_handler(PriceAnalyzerError)
    async def handle_application_error(request: Request, exc: PriceAnalyzerError) -> JSONResponse:
        exc.log(logging.WARNING if exc.status_code < 500 else logging.ERROR)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    app.include_router(analysis.router)
    app.include_router(health.router)
    return app


app = create_app()
