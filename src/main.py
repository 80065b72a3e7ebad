"""FastAPI application entry point.

Run with: uvicorn src.main:app --port 8000
Startup fails fast when PostgreSQL or Redis is unreachable.
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config.settings import settings
from src.ra_admin.api.router import router as admin_router
from src.ra_admin.middleware.request_log import RequestLogMiddleware
from src.ra_common.database import check_database, engine
from src.ra_common.errors import AppError, CriticalIntegrityError
from src.ra_common.redis_client import check_redis, close_redis
from src.ra_common.response import error_response

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    await check_database()
    await check_redis()
    logger.info("%s ready", settings.APP_NAME)
    yield
    await engine.dispose()
    await close_redis()


VERSION = "0.1.0"

app = FastAPI(
    title=settings.APP_NAME,
    description="Admin and cron API for settling auction periods.",
    version=VERSION,
    lifespan=lifespan,
)
app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if isinstance(exc, CriticalIntegrityError):
        logger.error("Run aborted on %s: %s", request.url.path, exc.message)
    resp = error_response(exc.code, exc.message, getattr(request.state, "request_id", None))
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(admin_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": VERSION}
