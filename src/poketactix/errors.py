"""Domain error hierarchy shared by stores, services and the HTTP layer.

Every error carries a stable machine-readable ``code`` and the HTTP status the
API maps it to. Store failures are wrapped into :class:`StoreError` with the
original exception chained as ``__cause__``.
"""

from __future__ import annotations

import functools
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, ParamSpec, TypeVar

from sqlalchemy.exc import SQLAlchemyError

P = ParamSpec("P")
R = TypeVar("R")


class ErrorCode(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    DUPLICATE_USERNAME = "DUPLICATE_USERNAME"
    DUPLICATE_EMAIL = "DUPLICATE_EMAIL"
    FORBIDDEN = "FORBIDDEN"
    INVALID_DECK = "INVALID_DECK"
    INVALID_BATTLE = "INVALID_BATTLE"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    WEAK_PASSWORD = "WEAK_PASSWORD"
    INVALID_REQUEST = "INVALID_REQUEST"
    STARTER_GENERATION_FAILED = "STARTER_GENERATION_FAILED"
    INTERNAL = "INTERNAL"
    CANCELLED = "CANCELLED"


class GameError(Exception):
    """Base class for all errors surfaced by the progression core."""

    code: ErrorCode = ErrorCode.INTERNAL
    status_code: int = 500

    def __init__(self, message: str, **details: Any) -> None:  # noqa: ANN401
        super().__init__(message)
        self.message = message
        self.details = details

    def as_payload(self) -> dict[str, Any]:
        """JSON body used by the API error handler."""
        payload: dict[str, Any] = {"detail": self.message, "code": self.code.value}
        if self.details:
            payload["context"] = self.details
        return payload


class NotFoundError(GameError):
    code = ErrorCode.NOT_FOUND
    status_code = 404

    def __init__(self, entity: str, key: object) -> None:
        super().__init__(f"{entity} {key!r} not found", entity=entity)
        self.entity = entity
        self.key = key


class DuplicateUsernameError(GameError):
    code = ErrorCode.DUPLICATE_USERNAME
    status_code = 409

    def __init__(self, username: str) -> None:
        super().__init__("Username already exists")
        self.username = username


class DuplicateEmailError(GameError):
    code = ErrorCode.DUPLICATE_EMAIL
    status_code = 409

    def __init__(self, email: str) -> None:
        super().__init__("Email already exists")
        self.email = email


class ForbiddenError(GameError):
    """The caller does not own the resource."""

    code = ErrorCode.FORBIDDEN
    status_code = 403


class InvalidDeckError(GameError):
    code = ErrorCode.INVALID_DECK
    status_code = 400


class InvalidBattleError(GameError):
    code = ErrorCode.INVALID_BATTLE
    status_code = 400


class InvalidCredentialsError(GameError):
    code = ErrorCode.INVALID_CREDENTIALS
    status_code = 401


class WeakPasswordError(GameError):
    code = ErrorCode.WEAK_PASSWORD
    status_code = 400


class StarterGenerationError(GameError):
    """The starter deck could not be filled within the retry budget."""

    code = ErrorCode.STARTER_GENERATION_FAILED
    status_code = 502

    def __init__(self, accepted: int, wanted: int) -> None:
        super().__init__(f"failed to generate {wanted} starter cards, only got {accepted}")
        self.accepted = accepted
        self.wanted = wanted


class StoreError(GameError):
    """Unexpected persistence failure. Never retried by the core."""

    code = ErrorCode.INTERNAL
    status_code = 500


class RequestCancelledError(GameError):
    code = ErrorCode.CANCELLED
    status_code = 499


def store_errors(operation: str) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Wrap raw SQLAlchemy failures of a store coroutine into :class:`StoreError`.

    Domain errors raised inside the store pass through untouched.
    """

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            try:
                return await func(*args, **kwargs)
            except SQLAlchemyError as e:
                msg = f"{operation} failed: {e.__class__.__name__}"
                raise StoreError(msg, operation=operation) from e

        return wrapper

    return decorator
