"""
Accounts service — application entry point.
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from api.errors import register_exception_handlers
from api.health import liveness, router as health_router
from api.middleware import register_middleware
from api.routes import router as users_router
from auth.jwt import TokenService
from auth.password import PasswordHasher
from auth.routes import router as auth_router
from config.settings import Settings, config
from database.migrations import run_migrations
from database.session import build_engine, build_session_factory

logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
    stream=sys.stdout,
)
for _noisy in ("aiosqlite", "asyncio"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or config
    base_path = settings.base_path.rstrip("/")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.uses_default_secret and settings.env != "development":
            logger.warning("JWT_SECRET is the development default; set a real secret for %s", settings.env)

        logger.info("Running database migrations…")
        await run_migrations(app.state.engine)
        logger.info("Accounts service ready at %s", base_path or "/")
        try:
            yield
        finally:
            await app.state.engine.dispose()

    app = FastAPI(
        title="Accounts Service",
        version="1.0.0",
        description="User registration, login and profile management.",
        docs_url=f"{base_path}/docs",
        openapi_url=f"{base_path}/openapi.json",
        redoc_url=None,
        lifespan=lifespan,
    )

    engine = build_engine(settings.database_url, echo=settings.debug)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.password_hasher = PasswordHasher.from_settings(settings)
    app.state.token_service = TokenService.from_settings(settings)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middleware(app)
    register_exception_handlers(app)

    # Routes
    app.include_router(auth_router, prefix=f"{base_path}/auth")
    app.include_router(users_router, prefix=f"{base_path}/users")
    app.include_router(health_router, prefix=base_path)

    @app.get("/health", include_in_schema=False)
    async def health(request: Request):
        return liveness(request)

    @app.get("/swagger", include_in_schema=False)
    async def swagger() -> RedirectResponse:
        return RedirectResponse(f"{base_path}/docs", status_code=302)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
