from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from customerbook.config import Settings, get_settings
from customerbook.db.session import Database
from customerbook.errors import NotFoundError, StorageError, ValidationError
from customerbook.logging_config import configure_logging
from customerbook.services.customers_service import CustomerStore

from customerbook.api.routers import customers as customers_routes

logger = logging.getLogger(__name__)


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc), "errors": exc.errors})

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        # same body shape as store validation failures
        err = ValidationError.from_pydantic(exc, skip_sources=True)
        return JSONResponse(status_code=422, content={"detail": str(err), "errors": err.errors})

    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(StorageError)
    async def _storage_error(request: Request, exc: StorageError) -> JSONResponse:
        # cause is already logged by the store; don't leak driver messages
        return JSONResponse(status_code=503, content={"detail": "Storage temporarily unavailable."})


def create_app(settings: Settings | None = None, database: Database | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    The Database is opened when the app starts and closed when it shuts down;
    pass `database` to share an already-configured handle (tests, workers).
    """
    settings = settings or get_settings()
    configure_logging(settings)
    database = database or Database.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database.open()
        if settings.create_tables:
            database.create_all()
        app.state.customer_store = CustomerStore(database, recent_limit=settings.recent_limit)
        logger.info("customerbook API ready")
        try:
            yield
        finally:
            database.close()

    app = FastAPI(
        title="customerbook",
        version="0.1.0",
        description="Customer record management: create, fetch, list, search and partially update customers.",
        lifespan=lifespan,
    )

    allow_origins = [str(settings.frontend_origin).rstrip("/")] if settings.frontend_origin else ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=settings.frontend_origin is not None,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_error_handlers(app)

    # ---------------------------------------------------------------------------
    # Routers (all mounted under /api/v1)
    # ---------------------------------------------------------------------------
    app.include_router(customers_routes.router, prefix="/api/v1")  # /api/v1/customers/...

    @app.get("/health", tags=["system"])
    async def health_check() -> dict:
        """
        Simple health check endpoint for monitoring / readiness probes.
        """
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    return app


app = create_app()
