"""API routes."""

from timecard_engine.api.routes.generation import router as generation_router
from timecard_engine.api.routes.health import router as health_router
from timecard_engine.api.routes.pay_calendars import router as pay_calendars_router
from timecard_engine.api.routes.templates import router as templates_router

__all__ = [
    "generation_router",
    "health_router",
    "pay_calendars_router",
    "templates_router",
]
