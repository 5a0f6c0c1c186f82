"""
vtmsu.api.app

FastAPI app factory.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Initialize and dispose shared infrastructure (DB engine/session factory).
- Translate storage-engine constraint violations into HTTP 409 responses.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.status import HTTP_409_CONFLICT

from vtmsu import __version__
from vtmsu.api.routers.catalog import router as catalog_router
from vtmsu.api.routers.characters import router as characters_router
from vtmsu.api.routers.dev_auth import router as dev_auth_router
from vtmsu.api.routers.health import router as health_router
from vtmsu.api.routers.hunting import router as hunting_router
from vtmsu.api.routers.hunts import router as hunts_router
from vtmsu.api.routers.posts import router as posts_router
from vtmsu.api.routers.rules import router as rules_router
from vtmsu.api.routers.shop import router as shop_router
from vtmsu.api.routers.users import router as users_router
from vtmsu.db.init_db import init_db
from vtmsu.db.session import create_engine, create_sessionmaker
from vtmsu.observability.logging import configure_logging, get_logger
from vtmsu.observability.middleware import RequestContextMiddleware
from vtmsu.settings import Settings, get_settings

log = get_logger(__name__)


async def _integrity_error_handler(_: Request, exc: IntegrityError) -> JSONResponse:
    # Not-null, unique, check and foreign-key violations all land here.
    # Driver text names tables and constraints; it goes to the log only.
    log.warning("integrity_error", error=str(exc.orig))
    return JSONResponse(status_code=HTTP_409_CONFLICT, content={"detail": "Constraint violation"})


def create_app(*, settings: Settings) -> FastAPI:
    configure_logging(
        service_name=settings.service_name,
        level=settings.log_level,
        json_logs=settings.env != "dev",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        if settings.env in ("dev", "test"):
            # Prod uses Alembic migrations instead.
            await init_db(engine)
        try:
            yield
        finally:
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="VTM:SU game management API",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    # Auth dependencies resolve `get_settings`; point them at this app's settings.
    app.dependency_overrides[get_settings] = lambda: settings

    app.add_middleware(RequestContextMiddleware)
    app.add_exception_handler(IntegrityError, _integrity_error_handler)

    app.include_router(health_router, tags=["health"])
    app.include_router(dev_auth_router)
    app.include_router(users_router)
    app.include_router(characters_router)
    app.include_router(hunts_router)
    app.include_router(hunting_router)
    app.include_router(catalog_router)
    app.include_router(rules_router)
    app.include_router(posts_router)
    app.include_router(shop_router)

    return app


# --- Module Notes -----------------------------------------------------------
# App composition stays here; data access stays in `vtmsu.db.repositories`.
