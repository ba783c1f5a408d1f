"""Middleware registration."""

from fastapi import FastAPI

from poketactix.config import Settings
from poketactix.middleware.cors import setup_cors
from poketactix.middleware.error_handler import setup_error_handlers
from poketactix.middleware.logging import setup_logging
from poketactix.middleware.request_id import RequestIdMiddleware
from poketactix.middleware.timeout import RequestTimeoutMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register all middleware in the correct order.

    FastAPI/Starlette executes middleware in reverse-add order (last added = outermost).
    The request id is bound before the deadline starts so cancellations are logged with it.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(RequestTimeoutMiddleware, timeout_seconds=settings.request_timeout_seconds)
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
