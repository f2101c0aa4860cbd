"""Product Catalog API main application module.

This module is the composition root: it picks a repository, wires it
into the application through ``app.state``, configures middleware,
routers and exception handlers, and starts the server.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine
from starlette.exceptions import HTTPException

from catalog_api.api.health import router as health_router
from catalog_api.api.middleware import setup_middleware
from catalog_api.api.products import router as products_router
from catalog_api.domain.exceptions import (
    BadRequestError,
    ProductNotFoundError,
    RepositoryError,
)
from catalog_api.domain.repository import ProductRepository
from catalog_api.infrastructure.config import Settings, settings
from catalog_api.infrastructure.database import (
    create_engine,
    create_session_factory,
    create_tables,
)
from catalog_api.infrastructure.logging_config import configure_logging
from catalog_api.infrastructure.memory_repository import InMemoryProductRepository
from catalog_api.infrastructure.sql_repository import SqlProductRepository

logger = structlog.get_logger()


async def build_repository(
    app_settings: Settings,
) -> tuple[ProductRepository, AsyncEngine | None]:
    """Create the repository selected by settings.

    Args:
        app_settings: Application settings.

    Returns:
        The repository and, for the SQL backend, the engine to dispose
        on shutdown.
    """
    if app_settings.storage_backend == "sql":
        engine = create_engine(app_settings.database_url, echo=app_settings.debug)
        await create_tables(engine)
        repository = SqlProductRepository(
            create_session_factory(engine),
            timeout_seconds=app_settings.db_timeout_seconds,
        )
        return repository, engine

    return InMemoryProductRepository(), None


def create_app(
    repository: ProductRepository | None = None,
    app_settings: Settings | None = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        repository: Repository to use. When omitted, one is built at
            startup from ``app_settings.storage_backend``.
        app_settings: Settings, defaults to the environment-loaded ones.

    Returns:
        Configured application.
    """
    cfg = app_settings or settings
    configure_logging(cfg)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Handle application startup and shutdown events."""
        engine = None
        if app.state.repository is None:
            app.state.repository, engine = await build_repository(cfg)

        logger.info(
            "Starting Product Catalog API",
            version=cfg.api_version,
            repository=type(app.state.repository).__name__,
        )

        try:
            yield
        finally:
            if engine is not None:
                await engine.dispose()
            logger.info("Shutting down Product Catalog API")

    app = FastAPI(
        title="Product Catalog API",
        description="CRUD service for the product catalog",
        version=cfg.api_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.repository = repository

    setup_middleware(app, request_timeout_seconds=cfg.request_timeout_seconds)

    app.include_router(health_router, tags=["Health"])
    app.include_router(products_router)

    app.add_exception_handler(BadRequestError, bad_request_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ProductNotFoundError, not_found_handler)
    app.add_exception_handler(RepositoryError, repository_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)

    return app


# ============================================================================
# Custom Exception Handlers
# ============================================================================


def _error_response(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    details: list[dict] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error_code": error_code,
            "message": message,
            "details": details or [],
            "request_id": getattr(request.state, "request_id", None),
        },
    )


async def bad_request_handler(request: Request, exc: BadRequestError) -> JSONResponse:
    """Surface validation errors verbatim as 400."""
    details = [{"field": exc.field, "message": exc.message}] if exc.field else []
    return _error_response(
        request, status.HTTP_400_BAD_REQUEST, "BAD_REQUEST", exc.message, details
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Map undecodable or mistyped request bodies to 400."""
    details = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())[1:]) or None,
            "message": error.get("msg", "invalid value"),
        }
        for error in exc.errors()
    ]
    return _error_response(
        request, status.HTTP_400_BAD_REQUEST, "BAD_REQUEST", "bad request", details
    )


async def not_found_handler(request: Request, exc: ProductNotFoundError) -> JSONResponse:
    """Map missing products to 404."""
    return _error_response(
        request, status.HTTP_404_NOT_FOUND, "PRODUCT_NOT_FOUND", exc.message
    )


async def repository_error_handler(request: Request, exc: RepositoryError) -> JSONResponse:
    """Log storage failures and hide them behind a generic 500."""
    logger.error(
        "Repository failure",
        path=request.url.path,
        method=request.method,
        error=exc.message,
    )
    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_ERROR",
        "internal error",
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions with consistent format."""
    detail = exc.detail
    if isinstance(detail, dict):
        error_code = detail.get("error_code", "ERROR")
        message = detail.get("message", str(detail))
    else:
        error_code = "ERROR"
        message = str(detail)

    response = _error_response(request, exc.status_code, error_code, message)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


app = create_app()


def run() -> None:
    """Start the API server on the configured host and port."""
    uvicorn.run(
        "catalog_api.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
    )
