"""FastAPI application factory."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from crudgate.api.dependencies import CORRELATION_HEADER
from crudgate.api.routing import Resource, build_router
from crudgate.infrastructure.database import (
    Settings,
    create_engine,
    create_session_factory,
    get_settings,
)

logger = logging.getLogger(__name__)


def create_app(
    resources: Iterable[Resource],
    settings: Settings | None = None,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> FastAPI:
    """Composition root: one router per resource over a shared session factory.

    When session_factory is not given, an engine is built from settings and
    disposed on shutdown.
    """
    settings = settings or get_settings()
    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))

    engine = None
    if session_factory is None:
        engine = create_engine(settings)
        session_factory = create_session_factory(engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        if engine is not None:
            await engine.dispose()

    app = FastAPI(title="crudgate", lifespan=lifespan)
    app.state.session_factory = session_factory

    @app.middleware("http")
    async def echo_correlation_id(request: Request, call_next):
        response = await call_next(request)
        correlation_id = getattr(request.state, "correlation_id", None)
        if correlation_id:
            response.headers[CORRELATION_HEADER] = correlation_id
        return response

    for resource in resources:
        app.include_router(build_router(resource))
        logger.info(
            "Exposing %s at /%s (%s)",
            resource.entity_type.__name__,
            resource.name,
            resource.kind.value,
        )

    return app
