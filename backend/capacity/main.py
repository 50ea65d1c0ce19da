import asyncio

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from capacity.core.config import settings
from capacity.core.logging import configure_logging, logger
from capacity.api.router import api_router
from capacity.db.session import SessionLocal, engine
from capacity.db.base import Base
from capacity.db import models  # noqa: F401  (registers tables on Base.metadata)
from capacity.services.planning.feed import FeedResult
from capacity.services.planning.state import DebouncedRefresher, FeedStore
from capacity.services.reports.service import fetch_feed
from capacity.services.seed import seed_demo


def _load_feed() -> FeedResult:
    db = SessionLocal()
    try:
        return fetch_feed(db)
    finally:
        db.close()


async def _fetch_feed() -> FeedResult:
    return await asyncio.to_thread(_load_feed)


def create_app() -> FastAPI:
    configure_logging(settings.ENV)
    app = FastAPI(title="Capacity Planner", version="0.1.0")

    origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.feed_store = FeedStore()
    app.state.refresher = DebouncedRefresher(
        app.state.feed_store, _fetch_feed, delay_ms=settings.REFRESH_DEBOUNCE_MS
    )

    @app.get("/healthz")
    def healthz():
        return {"status": "ok", "feed_version": app.state.feed_store.version}

    @app.on_event("startup")
    async def _startup():
        # dev-only convenience; in prod rely on alembic
        if settings.ENV == "dev":
            Base.metadata.create_all(bind=engine)
        if settings.SEED_DEMO and settings.ENV == "dev":
            await asyncio.to_thread(seed_demo)
        await app.state.refresher.refresh_now("startup")

    @app.on_event("shutdown")
    async def _shutdown():
        app.state.refresher.close()

    app.include_router(api_router)
    logger.info("app_started", env=settings.ENV)
    return app

app = create_app()
