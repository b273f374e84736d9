"""
FastAPI application factory.

* Registers routes for customer orders, the operator panel and the
  exchange rate.
* Starts / stops the background reminder worker via lifespan events.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from airport_taxi.api.middleware import limiter
from airport_taxi.api.routes import admin, orders, rates
from airport_taxi.infrastructure.redis_client import close_redis
from airport_taxi.workers import reminders as _reminders

logging.basicConfig(level=logging.INFO)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the reminder worker on startup; stop on shutdown."""
    await _reminders.start_reminder_loop()
    yield
    await _reminders.stop_reminder_loop()
    await close_redis()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Airport Taxi Booking API",
        description=(
            "Pre-booked airport transfers: customers book and manage rides "
            "with a private link, operators confirm, reject or counter-offer "
            "from e-mail, and reminders go out before and after pickup."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Routers
    app.include_router(orders.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")
    app.include_router(rates.router, prefix="/api/v1")

    return app
