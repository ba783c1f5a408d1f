"""FastAPI authentication dependencies."""

from __future__ import annotations

import jwt
from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from poketactix.auth.jwt import verify_token
from poketactix.database import get_session
from poketactix.db.models import User
from poketactix.errors import InvalidCredentialsError, NotFoundError
from poketactix.users.store import get_user_by_id

_bearer = HTTPBearer()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Security(_bearer),
    db: AsyncSession = Depends(get_session),
) -> User:
    """Extract and verify the bearer JWT, return the User model. Raises 401 on failure."""
    try:
        payload = verify_token(credentials.credentials, expected_type="access")
        user_id = int(payload["sub"])
    except (jwt.InvalidTokenError, KeyError, ValueError) as e:
        raise InvalidCredentialsError(str(e) or "Invalid token") from e

    try:
        return await get_user_by_id(db, user_id)
    except NotFoundError as e:
        raise InvalidCredentialsError("User not found") from e
