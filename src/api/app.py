"""
FastAPI application factory.

* Registers routes for orders and admin.
* Builds the order store, distance lookup and lifecycle manager in the
  lifespan, and releases them on shutdown.
* Maps every failure onto a ``{"error": "<CODE>"}`` body.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api.middleware import limiter
from src.api.routes import admin, orders
from src.config import settings
from src.domain.enums import ErrorCode
from src.domain.errors import OrderServiceError
from src.domain.lifecycle import OrderLifecycleManager
from src.infrastructure.database import Base, create_engine, create_session_factory
from src.infrastructure.distance_client import build_distance_lookup
from src.infrastructure.repositories import OrderStore

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Wire the lifecycle manager on startup; release resources on shutdown."""
    distance_lookup = build_distance_lookup(settings)
    engine = create_engine(settings.database_url)
    if settings.create_schema_on_startup:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    app.state.order_manager = OrderLifecycleManager(
        OrderStore(create_session_factory(engine)),
        distance_lookup,
        claim_timeout=settings.claim_timeout_seconds,
        default_page_size=settings.default_page_size,
    )
    logger.info("Order service ready (distance provider=%s)", settings.distance_provider)
    yield
    await distance_lookup.aclose()
    await engine.dispose()
    logger.info("Order service stopped")


# ── Error mapping ─────────────────────────────────────────────────────


def _error(status_code: int, code: ErrorCode, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"error": code.value}, headers=headers
    )


async def _order_error_handler(request: Request, exc: OrderServiceError):
    level = logging.ERROR if exc.http_status >= 500 else logging.INFO
    logger.log(
        level, "%s %s %d %s: %s",
        request.method, request.url.path, exc.http_status, exc.code.value, exc,
    )
    return _error(exc.http_status, exc.code)


def _validation_code(exc: RequestValidationError) -> ErrorCode:
    for err in exc.errors():
        loc = tuple(err.get("loc", ()))
        if loc[:1] == ("path",):
            return ErrorCode.INVALID_ORDER_ID
        if loc[:1] == ("query",):
            return ErrorCode.INVALID_PARAMETERS
        if loc[:2] == ("body", "origin"):
            return ErrorCode.MALFORMED_ORIGIN
        if loc[:2] == ("body", "destination"):
            return ErrorCode.MALFORMED_DESTINATION
        if loc[:2] == ("body", "status"):
            return ErrorCode.INVALID_PARAMETERS
    return ErrorCode.MALFORMED_PAYLOAD


async def _validation_error_handler(request: Request, exc: RequestValidationError):
    code = _validation_code(exc)
    logger.info("%s %s 400 %s", request.method, request.url.path, code.value)
    return _error(400, code)


async def _http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        code = ErrorCode.INVALID_PATH
    elif exc.status_code == 405:
        code = ErrorCode.DISALLOWED_METHOD
    else:
        return await http_exception_handler(request, exc)
    logger.info("%s %s %d", request.method, request.url.path, exc.status_code)
    return _error(exc.status_code, code, headers=getattr(exc, "headers", None))


def create_app() -> FastAPI:
    app = FastAPI(
        title="Order Dispatch API",
        description=(
            "Creates delivery orders tagged with their road distance, lists "
            "them page by page, and lets workers take an order.  Each order "
            "can be taken exactly once, even under concurrent requests."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Error bodies
    app.add_exception_handler(OrderServiceError, _order_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)

    # Routers
    app.include_router(orders.router)
    app.include_router(admin.router)

    return app
