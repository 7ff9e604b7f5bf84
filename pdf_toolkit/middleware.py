import time
from typing import Callable

from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from pdf_toolkit.exceptions import ToolkitError


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and duration of every request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        logger.debug(f"Request: {request.method} {request.url.path}")

        response = await call_next(request)

        duration_ms = (time.time() - start_time) * 1000
        log_level = "info" if response.status_code < 400 else "warning"
        getattr(logger, log_level)(
            f"Response: {request.method} {request.url.path} "
            f"status={response.status_code} "
            f"duration={duration_ms:.1f}ms"
        )
        response.headers["X-Process-Time"] = f"{duration_ms:.1f}ms"
        return response


async def toolkit_error_handler(request: Request, exc: ToolkitError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error(
        f"Unhandled error on {request.method} {request.url.path}: {type(exc).__name__}: {exc}"
    )
    return JSONResponse(status_code=500, content={"error": str(exc) or "Internal server error"})
