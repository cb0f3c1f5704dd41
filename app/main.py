from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import health_router, router
from app.web import router as web_router
from logging_config import configure_logging
from services.waste import WasteService, build_default_service
from settings import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    injected = app.state.service is not None
    if not injected:
        app.state.service = build_default_service()
    logger.info("Serving readings", extra={"count": len(app.state.service.store)})
    try:
        yield
    finally:
        if not injected:
            app.state.service = None
            build_default_service.cache_clear()


def create_app(service: Optional[WasteService] = None) -> FastAPI:
    """Build the application; ``service`` overrides the settings-wired default."""
    configure_logging()
    settings = get_settings()
    app = FastAPI(
        title="Binlytics",
        description="Waste-bin readings, segregation scores and aggregate statistics.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.service = service
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.include_router(router)
    app.include_router(health_router)
    app.include_router(web_router)
    return app

app = create_app()
