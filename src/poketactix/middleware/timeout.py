"""Per-request deadline.

The handler runs as a cancellable task; when the deadline passes the task is
cancelled, its database session closes without committing (rolling back any
partial work) and the client receives 499 CANCELLED.
"""

from __future__ import annotations

import asyncio

import structlog
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from poketactix.errors import RequestCancelledError

logger = structlog.get_logger()


class RequestTimeoutMiddleware:
    """Pure ASGI middleware so cancellation reaches the endpoint task directly."""

    def __init__(self, app: ASGIApp, timeout_seconds: float = 30.0) -> None:
        self.app = app
        self.timeout_seconds = timeout_seconds

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or self.timeout_seconds <= 0:
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await asyncio.wait_for(self.app(scope, receive, send_wrapper), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning("request_cancelled", path=scope.get("path"), timeout_seconds=self.timeout_seconds)
            if response_started:
                return
            error = RequestCancelledError("Request cancelled: deadline exceeded")
            response = JSONResponse(status_code=error.status_code, content=error.as_payload())
            await response(scope, receive, send)
