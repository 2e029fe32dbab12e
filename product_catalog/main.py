from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from product_catalog.api.routes import router as products_router
from product_catalog.core.config import Settings, get_settings
from product_catalog.core.db import get_engine, sync_schema
from product_catalog.core.errors import NotFoundError, StorageError, ValidationError
from product_catalog.core.logging import configure_logging, get_logger
from product_catalog.middlewares.request_id import REQUEST_ID_HEADER, RequestIdMiddleware, resolve_request_id
from product_catalog.schemas import violations_from_errors

logger = get_logger(__name__)


def _validation_response(violations) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Validation failed", "errors": [v.to_dict() for v in violations]},
    )


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return _validation_response(violations_from_errors(exc.errors()))

    @app.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError):
        return _validation_response(exc.violations)

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": "Product not found"})

    @app.exception_handler(StorageError)
    async def storage_handler(request: Request, exc: StorageError):
        # Already logged with the driver error by the repository; keep the body opaque.
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal storage error"},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        # Runs in ServerErrorMiddleware, outside RequestIdMiddleware: set the header here.
        request_id = resolve_request_id(request)
        logger.exception("Unhandled exception [%s]", request_id)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Unexpected error", "requestId": request_id},
            headers={REQUEST_ID_HEADER: request_id},
        )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application. Settings are validated first, so a bad environment
    raises ConfigError here and nothing is ever served.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.db_synchronize:
            sync_schema(get_engine())
        yield
        get_engine().dispose()

    app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "X-Request-Id"],
        expose_headers=["X-Request-Id"],
    )

    register_exception_handlers(app)

    @app.get("/health")
    def health():
        return {
            "status": "ok",
            "service": settings.app_name,
            "env": settings.environment,
            "version": settings.app_version,
        }

    app.include_router(products_router)

    # No secrets here: the password never leaves Settings.
    logger.info(
        "%s %s configured (env=%s, db=%s:%s/%s, cors=%s)",
        settings.app_name,
        settings.app_version,
        settings.environment,
        settings.postgres_host,
        settings.postgres_port,
        settings.postgres_db,
        settings.cors_origins or "disabled",
    )
    return app


app = create_app()
