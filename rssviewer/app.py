# rssviewer/app.py
import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rssviewer.api.routers import health, news, securities, sentiment
from rssviewer.api.schemas.common import INTERNAL_ERROR
from rssviewer.core.config import Settings, get_settings
from rssviewer.core.logging import setup_logging
from rssviewer.storage.dao import QueryError
from rssviewer.storage.db import PoolSet, ensure_sentiment_table, run_diagnostics

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 Starting RSSViewer API ...")
    pools = app.state.pools
    for name, pool in pools:
        logger.info("[DB-CONFIG] %s DB: %s", name, pool.config.masked_url)
    # the sentiment table must exist before uvicorn accepts connections;
    # probes and row counts only log, so they run alongside serving
    await ensure_sentiment_table(pools.sentiment)
    app.state.diagnostics = asyncio.create_task(run_diagnostics(pools))

    yield

    logger.info("🛑 Stopping RSSViewer API ...")
    task = app.state.diagnostics
    if not task.done():
        task.cancel()
    with suppress(asyncio.CancelledError):
        await task
    await pools.close()


def error_body(details: str) -> dict:
    return {"error": INTERNAL_ERROR, "details": details}


async def query_error_handler(request: Request, exc: QueryError) -> JSONResponse:
    return JSONResponse(status_code=500, content=error_body(exc.message))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # e.g. a NULL title in the news table failing response validation
    logger.error("[API] ❌ Unhandled error on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
    return JSONResponse(status_code=500, content=error_body(str(exc)))


def create_app(settings: Optional[Settings] = None, pools: Optional[PoolSet] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(title="RSSViewer API", lifespan=lifespan)
    app.state.settings = settings
    app.state.pools = pools or PoolSet.from_settings(settings)

    # Requests without an Origin header (curl, server-to-server) are not CORS
    # requests and pass through untouched.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.add_exception_handler(QueryError, query_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(health.router)
    app.include_router(news.router)
    app.include_router(sentiment.router)
    app.include_router(securities.router)
    return app


app = create_app()
