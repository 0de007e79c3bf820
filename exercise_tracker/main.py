"""FastAPI application wiring for the exercise tracker."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from psycopg_pool import ConnectionPool

from .api.routes import router as api_router
from .config import get_settings
from .domain.service import ExerciseStore, UserStore
from .logging_config import setup_logging
from .repository import TrackerRepository

settings = get_settings()
setup_logging(settings.log_level)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the Postgres pool and build the stores for the app lifecycle."""
    pool = ConnectionPool(
        settings.database_url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
        open=False,
    )
    pool.open()
    try:
        repository = TrackerRepository(pool)
        if settings.auto_create_schema:
            repository.ensure_schema()
        users = UserStore(repository)
        app.state.pool = pool
        app.state.user_store = users
        app.state.exercise_store = ExerciseStore(
            repository, users, count_applies_limit=settings.count_applies_limit
        )
        yield
    finally:
        pool.close()


app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/healthz", tags=["health"])
def healthz() -> dict[str, str]:
    """Return a minimal readiness indicator used by orchestration systems."""
    return {"status": "ok"}


@app.get("/metrics")
def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


app.include_router(api_router)


def run() -> None:
    """Serve the app with uvicorn on the configured host and port."""
    logger.info("listening on %s:%s", settings.http_host, settings.http_port)
    uvicorn.run(app, host=settings.http_host, port=settings.http_port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
