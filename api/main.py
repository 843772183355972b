from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from commits import router as commits_router
from core import db
from core.config import Settings, load_settings
from core.log import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    setup_logging(settings.log_level)
    # One pool per process; a failed probe is logged, not fatal.
    app.state.pool = await db.create_pool(settings)
    await db.probe(app.state.pool, timeout_s=settings.acquire_timeout_s)
    logger.info("Server running on port %s", settings.port)
    try:
        yield
    finally:
        logger.info("Shutting down server...")
        await db.close_pool(app.state.pool)
        app.state.pool = None
        logger.info("Pool has ended")


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()

    app = FastAPI(title="commit-api", lifespan=lifespan)
    app.state.settings = settings
    app.state.pool = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(commits_router.router, tags=["commits"])

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    return app


app = create_app()


def run() -> None:
    settings: Settings = app.state.settings
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
