"""API middleware: CORS, request logging, and error handling.

# ─── MIDDLEWARE EXECUTION ORDER ───────────────────────────────────────
#
# Starlette middleware is a stack (last added, first executed):
#
#   In main.py:
#     app.add_middleware(AdminAuthMiddleware)       # innermost
#     app.add_middleware(ErrorHandlingMiddleware)
#     app.add_middleware(RequestLoggingMiddleware)
#     configure_cors(app)                           # outermost
#
#   Request flow:
#     Client → CORS → RequestLogging → ErrorHandling → AdminAuth → route
#
# RequestLoggingMiddleware therefore sees the final status code, including
# 401s from AdminAuth and JSON errors produced by ErrorHandling.
#
# FastAPI's own HTTPException and request-validation errors never reach
# a middleware (the router turns them into responses first), so they get
# exception handlers registered by ``register_exception_handlers``.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import time

import pydantic
import structlog
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from tourstack.utils.errors import TourStackError

logger = structlog.get_logger(logger_name=__name__)


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Add CORS middleware.  Without explicit origins every origin is allowed.

    The admin SPA sends the session cookie, so credentials are allowed and
    the wildcard is expressed as a regex (browsers reject ``*`` together
    with credentials).
    """
    if allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allowed_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    else:
        app.add_middleware(
            CORSMiddleware,
            allow_origin_regex=".*",
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )


# ---------------------------------------------------------------------------
# Request Logging
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status code, and duration."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        response: Response | None = None

        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            status_code = response.status_code if response else 500
            logger.info(
                "http_request",
                method=request.method,
                path=str(request.url.path),
                status=status_code,
                duration_ms=duration_ms,
            )


# ---------------------------------------------------------------------------
# Error Handling
# ---------------------------------------------------------------------------


def error_response(exc: TourStackError) -> JSONResponse:
    """``{"error": message, ...extra}`` with the exception's status code."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, **exc.extra_payload()},
    )


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Turn ``TourStackError`` subclasses into ``{"error": ...}`` JSON bodies.

    Model validation failures raised inside services (bad enum value on
    update, malformed content block) are client errors and answer 400.
    Stack traces stay in the server log.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except TourStackError as exc:
            log = logger.warning if exc.status_code < 500 else logger.error
            log(
                "application_error",
                error_type=type(exc).__name__,
                message=exc.message,
                provider=exc.provider_name,
                status=exc.status_code,
                path=str(request.url.path),
            )
            return error_response(exc)
        except pydantic.ValidationError as exc:
            logger.warning("model_validation_error", path=str(request.url.path), errors=exc.error_count())
            return JSONResponse(
                status_code=400,
                content={"error": "Invalid request", "details": _clean_errors(exc.errors())},
            )


# ---------------------------------------------------------------------------
# Exception handlers (FastAPI-raised errors)
# ---------------------------------------------------------------------------


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def _http_exception(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request", "details": _clean_errors(exc.errors())},
        )


def _clean_errors(errors: list) -> list[dict]:
    """Keep only the JSON-safe parts of pydantic error entries."""
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in errors
    ]
