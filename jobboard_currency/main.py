from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException
from .core.config import get_settings, Settings
from .core.logging import init_logging, request_context_middleware
from .core import errors
from .routers import currency
from .services.currency_service import CurrencyService, build_currency_service

logger = logging.getLogger("jobboard_currency")


def create_app(
    settings_override: Settings | None = None,
    service_override: CurrencyService | None = None,
    initialize: bool = True,
) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment (e.g., temp DB). Falls back to cached get_settings().
    service_override: pre-wired CurrencyService (fake clock / fake HTTP).
    initialize: run currency detection and rate loading on startup.
    """
    settings = settings_override or get_settings()
    # Initialize logging early
    init_logging(debug=settings.debug)

    service = service_override or build_currency_service(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if initialize:
            # Both calls degrade to fallbacks internally, so startup never fails here.
            await run_in_threadpool(service.initialize)
        yield

    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        version=settings.version,
        lifespan=lifespan,
    )
    app.state.currency_service = service

    # Middleware (request id / structured logging)
    app.middleware("http")(request_context_middleware)

    # Error handlers
    app.add_exception_handler(StarletteHTTPException, errors.not_found_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers
    app.include_router(currency.router)

    @app.get("/")
    async def root():
        return {"message": settings.app_name, "version": settings.version}

    return app


app = create_app()
