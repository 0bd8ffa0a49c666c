"""FastAPI application factory."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from api.v1.envelope import failure_body
from api.v1.router import api_router
from core import settings
from services.errors import ServiceError, UpstreamFailure
from services.rate_limiter import RateLimitMiddleware, get_rate_limiter

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"
HEALTH_PATHS = ("/health", f"{API_PREFIX}/health")


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


async def _service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if isinstance(exc, UpstreamFailure):
        logger.error(
            "Upstream failure",
            extra={"path": request.url.path, "detail": exc.detail},
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=failure_body(exc.message, jsonable_encoder(exc.data)),
    )


async def _http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    data = None if isinstance(exc.detail, str) else jsonable_encoder(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=failure_body(message, data),
        headers=getattr(exc, "headers", None),
    )


async def _validation_error_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())[1:]) or None,
            "message": error.get("msg"),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=failure_body("Validation error", errors),
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", extra={"path": request.url.path})
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=failure_body("Something went wrong"),
    )


def create_app() -> FastAPI:
    """Build the application with middleware, error handlers and routers."""
    configure_logging()

    application = FastAPI(title=settings.app_name, version="1.0.0")

    application.add_middleware(
        RateLimitMiddleware,
        limiter_factory=get_rate_limiter,
        exempt_paths=HEALTH_PATHS,
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.add_exception_handler(ServiceError, _service_error_handler)
    application.add_exception_handler(HTTPException, _http_error_handler)
    application.add_exception_handler(RequestValidationError, _validation_error_handler)
    application.add_exception_handler(Exception, _unhandled_error_handler)

    application.include_router(api_router, prefix=API_PREFIX)

    @application.get("/health", tags=["health"])
    @application.get(f"{API_PREFIX}/health", tags=["health"])
    async def health_check() -> dict[str, object]:
        return {"success": True, "message": "OK", "data": {"status": "ok"}}

    return application
