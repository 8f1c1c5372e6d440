"""
FastAPI middleware for request logging and error handling.
"""

import time
from typing import Callable
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
import structlog

logger = structlog.get_logger(__name__)


def setup_logging_middleware(app: FastAPI) -> None:
    """
    Log every request with method, path, status code and processing time.
    """

    @app.middleware("http")
    async def log_requests(request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        logger.info(
            "Request started",
            method=request.method,
            path=request.url.path,
            client=request.client.host if request.client else None,
        )

        response = await call_next(request)

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


def setup_error_handling_middleware(app: FastAPI) -> None:
    """
    Turn unhandled exceptions into a consistent JSON 500 response.
    """

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
