"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from timecard_engine import __version__
from timecard_engine.api.routes import (
    generation_router,
    health_router,
    pay_calendars_router,
    templates_router,
)
from timecard_engine.database import dispose_engine, init_db
from timecard_engine.logging_config import configure_logging
from timecard_engine.services.pay_calendar_service import (
    ConfigurationNotFoundError,
    PayCalendarValidationError,
)
from timecard_engine.services.template_registry import TemplateNotFoundError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    configure_logging()
    await init_db()
    yield
    await dispose_engine()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Timecard Engine API",
        description="Recurring monthly timecard generation for school districts",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(ConfigurationNotFoundError)
    async def configuration_not_found_handler(
        request: Request, exc: ConfigurationNotFoundError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": str(exc), "code": "CONFIGURATION_NOT_FOUND"},
        )

    @app.exception_handler(TemplateNotFoundError)
    async def template_not_found_handler(
        request: Request, exc: TemplateNotFoundError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": str(exc), "code": "TEMPLATE_NOT_FOUND"},
        )

    @app.exception_handler(PayCalendarValidationError)
    async def pay_calendar_validation_handler(
        request: Request, exc: PayCalendarValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": "; ".join(exc.errors), "code": "INVALID_PAY_CALENDAR"},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            },
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(generation_router, prefix="/api/v1")
    app.include_router(pay_calendars_router, prefix="/api/v1")
    app.include_router(templates_router, prefix="/api/v1")

    return app


# Default app instance for uvicorn
app = create_app()
