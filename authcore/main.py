from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from authcore.api.routers.auth import router as auth_router
from authcore.api.routers.me import router as me_router
from authcore.infrastructure.db.engine import get_engine, init_schema
from authcore.shared.config import Settings, get_settings


logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    # Raises ConfigurationError before the app exists when JWT_SECRET is missing.
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Auth Session API")
    app.state.refresh_cookie_secure = settings.refresh_cookie_secure
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_allow_origins),
        allow_credentials="*" not in settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if settings.auto_create_schema and settings.postgres_dsn:
        init_schema(get_engine(settings.postgres_dsn))

    app.include_router(auth_router)
    app.include_router(me_router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    logger.info(
        "main: app_created providers=%s access_ttl=%s refresh_ttl=%s",
        ",".join(settings.enabled_providers) or "-",
        settings.jwt_access_ttl,
        settings.jwt_refresh_ttl,
    )
    return app
