from __future__ import annotations

import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.healthlog.api.headers import ALERT_HEADER, ERROR_HEADER, PARAMS_HEADER, TOTAL_COUNT_HEADER, failure_alert
from src.healthlog.api.routes import health_router, weights_router
from src.healthlog.api.schemas.common import fail
from src.healthlog.config import get_settings
from src.healthlog.db.repositories.bootstrap_repository import ensure_tables
from src.healthlog.db.session import db_transaction
from src.healthlog.errors import WeightServiceError
from src.healthlog.middleware import RequestBodyLimitMiddleware, RequestContextMiddleware
from src.healthlog.search.weight_index import weight_search_index

logger = logging.getLogger("healthlog.api")


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(title="Healthlog API", version="0.1.0", docs_url="/api/docs", redoc_url="/api/redoc")

    app.add_middleware(RequestContextMiddleware, timeout_seconds=settings.request_timeout_seconds)
    app.add_middleware(RequestBodyLimitMiddleware, max_bytes=settings.request_body_limit_bytes)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-Id", TOTAL_COUNT_HEADER, "Link", ALERT_HEADER, ERROR_HEADER, PARAMS_HEADER],
    )

    @app.on_event("startup")
    def on_startup() -> None:
        with db_transaction() as connection:
            ensure_tables(connection)
        weight_search_index.ensure_index()

    @app.exception_handler(WeightServiceError)
    async def handle_service_error(request: Request, exc: WeightServiceError):
        request_id = getattr(request.state, "request_id", uuid.uuid4().hex)
        return JSONResponse(
            status_code=exc.status_code,
            content=fail(code=f"error.{exc.error_key}", message=exc.message, request_id=request_id),
            headers=failure_alert(exc.entity, exc.error_key),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        request_id = getattr(request.state, "request_id", uuid.uuid4().hex)
        message = "; ".join([err.get("msg", "invalid input") for err in exc.errors()])
        return JSONResponse(
            status_code=422,
            content=fail(code="VALIDATION_ERROR", message=message, request_id=request_id),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        request_id = getattr(request.state, "request_id", uuid.uuid4().hex)
        message = str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content=fail(code="HTTP_ERROR", message=message, request_id=request_id),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        request_id = getattr(request.state, "request_id", uuid.uuid4().hex)
        logger.exception("Unhandled error", extra={"request_id": request_id})
        return JSONResponse(
            status_code=500,
            content=fail(code="INTERNAL_ERROR", message="Internal server error.", request_id=request_id),
        )

    app.include_router(health_router, prefix="/api")
    app.include_router(weights_router, prefix="/api")

    return app


app = create_app()
