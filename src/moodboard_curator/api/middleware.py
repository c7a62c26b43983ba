"""
FastAPI middleware for logging and error handling.
"""

import time
from typing import Callable

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from ..errors import CurationError, RateLimited


logger = structlog.get_logger(__name__)


def setup_logging_middleware(app: FastAPI) -> None:
    """
    Setup request/response logging middleware.

    Logs method, path, status code and processing time of every request.
    """

    @app.middleware("http")
    async def log_requests(request: Request, call_next: Callable) -> Response:
        start_time = time.time()

        logger.info(
            "Request started",
            method=request.method,
            path=request.url.path,
            query_params=str(request.query_params),
            client=request.client.host if request.client else None,
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                method=request.method,
                path=request.url.path,
                process_time_ms=round((time.time() - start_time) * 1000, 2),
                error=str(e),
                exc_info=True,
            )
            raise

        process_time = time.time() - start_time
        logger.info(
            "Request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            process_time_ms=round(process_time * 1000, 2),
        )
        response.headers["X-Process-Time"] = str(process_time)
        return response


def setup_error_handling(app: FastAPI) -> None:
    """
    Setup provider error mapping and the global catch-all.

    RateLimited maps to 429 (with Retry-After), other CurationErrors to 502,
    anything unhandled to a JSON 500.
    """

    @app.exception_handler(CurationError)
    async def handle_curation_error(request: Request, exc: CurationError) -> JSONResponse:
        if isinstance(exc, RateLimited):
            headers = {}
            if exc.retry_after is not None:
                headers["Retry-After"] = str(int(exc.retry_after))
            return JSONResponse(
                status_code=429,
                content={"success": False, "error": exc.user_message(), "retry_after": exc.retry_after},
                headers=headers,
            )

        logger.warning(
            "Upstream provider error",
            path=request.url.path,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return JSONResponse(
            status_code=502,
            content={"success": False, "error": exc.user_message()},
        )

    @app.middleware("http")
    async def handle_errors(request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(
                "Unhandled exception",
                method=request.method,
                path=request.url.path,
                error=str(e),
                exc_info=True,
            )
            return JSONResponse(
                status_code=500,
                content={
                    "success": False,
                    "error": "Internal server error",
                    "detail": str(e) if app.debug else "An unexpected error occurred",
                },
            )
