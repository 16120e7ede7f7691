"""Catalog API main application module.

This module initializes the FastAPI application and configures
core middleware, routers, and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from catalog_api.api.health import router as health_router
from catalog_api.api.middleware import setup_middleware
from catalog_api.api.products import router as products_router
from catalog_api.api.schemas import ErrorDetail, ErrorResponse
from catalog_api.infrastructure.config import settings
from catalog_api.infrastructure.database import engine, init_models
from catalog_api.infrastructure.logging import configure_logging

configure_logging(settings.log_level, settings.log_json)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    logger.info(
        "Starting catalog API",
        version=settings.api_version,
        debug=settings.debug,
    )

    if settings.create_tables_on_startup:
        await init_models()
        logger.info("Database tables ready")

    yield

    logger.info("Shutting down catalog API")
    await engine.dispose()


app = FastAPI(
    title="Catalog API",
    description="Product catalog management backend",
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware (must be added before custom middleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Setup custom middleware (request ID, error handling)
setup_middleware(app)

# Include routers
app.include_router(health_router, tags=["Health"])
app.include_router(products_router)


# ============================================================================
# Custom Exception Handlers
# ============================================================================


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions with consistent format."""
    request_id = getattr(request.state, "request_id", None)

    detail = exc.detail
    if isinstance(detail, dict):
        error_code = detail.get("error_code", "ERROR")
        message = detail.get("message", str(detail))
        details = detail.get("details", [])
    else:
        error_code = "ERROR"
        message = str(detail)
        details = []

    body = ErrorResponse(
        error_code=error_code,
        message=message,
        details=details,
        request_id=request_id,
    )
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle bodies and parameters that do not parse.

    Each pydantic error becomes one detail naming the offending field,
    without its location prefix (``body``, ``query``, ``path``).
    """
    details = [
        ErrorDetail(
            field=".".join(str(part) for part in error["loc"][1:]) or None,
            message=error["msg"],
        )
        for error in exc.errors()
    ]

    logger.warning(
        "Malformed request",
        path=request.url.path,
        fields=[d.field for d in details],
    )

    body = ErrorResponse(
        error_code="REQUEST_INVALID",
        message="Request could not be parsed",
        details=details,
        request_id=getattr(request.state, "request_id", None),
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=body.model_dump(),
    )
