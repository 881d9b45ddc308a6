"""Middleware registration."""

from fastapi import FastAPI

from wtd.config import Settings
from wtd.middleware.cors import setup_cors
from wtd.middleware.error_handler import setup_error_handlers
from wtd.middleware.logging import setup_logging
from wtd.middleware.rate_limit import RateLimitMiddleware
from wtd.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register all middleware in the correct order.

    Starlette runs middleware in reverse-add order (last added = outermost).
    CORS is outermost so it also wraps 429 responses from the rate limiter.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(
        RateLimitMiddleware,
        requests_per_window=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
        key_prefix=settings.cache_key_prefix,
    )
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
