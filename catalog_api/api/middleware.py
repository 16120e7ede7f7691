"""API middleware for the catalog API.

Provides:
- Request ID correlation
- Error handling
"""

import time
from typing import Callable
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import BaseHTTPMiddleware

from catalog_api.api.schemas import ErrorResponse

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"


# ============================================================================
# Request ID Middleware
# ============================================================================


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag every request with a correlation ID.

    The ID comes from the caller's ``X-Request-ID`` header or is generated.
    It is stored on ``request.state`` for the error envelopes, bound into
    the structlog context for service logs, and echoed in the response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())

        request.state.request_id = request_id
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start_time = time.perf_counter()
        response = None

        try:
            response = await call_next(request)
        finally:
            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=getattr(response, "status_code", 500),
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
            structlog.contextvars.unbind_contextvars("request_id")

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


# ============================================================================
# Error Handling Middleware
# ============================================================================


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Turn unhandled exceptions into a 500 error envelope.

    Catalog outcomes (not found, invalid request) never reach here; they
    travel as service results. What does reach here is mostly storage
    failure, which is logged with the product path so it can be traced.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            storage_failure = isinstance(e, SQLAlchemyError)

            logger.exception(
                "Product store failure" if storage_failure else "Unhandled exception",
                path=request.url.path,
                method=request.method,
                error=str(e),
            )

            body = ErrorResponse(
                error_code="INTERNAL_ERROR",
                message=(
                    "The product store could not complete the request"
                    if storage_failure
                    else "An internal error occurred"
                ),
                request_id=getattr(request.state, "request_id", None),
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=body.model_dump(),
            )


# ============================================================================
# Middleware Setup
# ============================================================================


def setup_middleware(app: FastAPI) -> None:
    """Configure all middleware for the application.

    Middleware is added in reverse order (last added = first executed).

    Args:
        app: FastAPI application instance.
    """
    # Error handling (inside request ID so failures are still correlated)
    app.add_middleware(ErrorHandlerMiddleware)

    # Request ID correlation
    app.add_middleware(RequestIdMiddleware)
