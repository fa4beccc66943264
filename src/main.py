"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import settings
from src.us_cache.api.router import router as cache_router
from src.us_card.api.router import router as card_router
from src.us_common.database import engine
from src.us_common.errors import AppError, InternalError, ValidationFailedError
from src.us_common.middleware.request_log import RequestLogMiddleware
from src.us_common.redis_client import close_redis, get_redis
from src.us_common.response import error_response
from src.us_user.api.router import router as user_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB + Redis connections. Shutdown: dispose."""
    # Startup
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    redis = await get_redis()
    await redis.ping()
    logger.info("%s started", settings.APP_NAME)
    yield
    # Shutdown
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    debug=settings.DEBUG,
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


def _with_request_id(request: Request, code: int, message: str, data: object = None) -> dict:
    resp = error_response(code, message, data)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp.model_dump()


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    data = exc.errors if isinstance(exc, ValidationFailedError) else None
    return JSONResponse(
        status_code=exc.http_status,
        content=_with_request_id(request, exc.code, exc.message, data),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors: dict[str, str] = {}
    for err in exc.errors():
        # loc is ("body" | "query" | "path", field, ...); keep the field path only
        field = ".".join(str(part) for part in err["loc"][1:]) or str(err["loc"][0])
        errors.setdefault(field, err["msg"])
    failure = ValidationFailedError(errors)
    return JSONResponse(
        status_code=failure.http_status,
        content=_with_request_id(request, failure.code, failure.message, errors),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    failure = InternalError()
    return JSONResponse(
        status_code=failure.http_status,
        content=_with_request_id(request, failure.code, failure.message),
    )


app.include_router(user_router, prefix="/api")
app.include_router(card_router, prefix="/api")
app.include_router(cache_router, prefix="/api")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}


@app.get("/")
async def root() -> dict[str, str]:
    return {"service": settings.APP_NAME, "docs": "/docs"}
