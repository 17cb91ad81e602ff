"""FastAPI application factory and lifespan."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from liftlog.api.v1 import api_router
from liftlog.core.config import get_settings
from liftlog.core.logging import configure_logging
from liftlog.db.session import async_session_maker, create_all, engine
from liftlog.services.registry import SessionRegistry
from liftlog.services.storage import SqlAlchemyStorage

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: create tables, pick up an unfinished workout; shutdown: stop it cleanly."""
    configure_logging(settings.log_level)
    await create_all(engine)
    registry = SessionRegistry(SqlAlchemyStorage(async_session_maker), settings)
    app.state.registry = registry
    await registry.recover()
    logger.info("%s started (%s)", settings.app_name, settings.environment)
    yield
    # Stops the rest timer and flushes queued writes; the workout stays resumable
    await registry.close()
    await engine.dispose()


def create_application() -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    # CORS: anything in debug, local frontends otherwise
    if settings.debug:
        cors_origins = ["*"]
    else:
        cors_origins = ["http://localhost:3000", "http://127.0.0.1:3000"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    def root():
        return {"status": "ok", "message": settings.app_name}

    app.include_router(api_router, prefix=settings.api_v1_prefix)
    return app


app = create_application()
