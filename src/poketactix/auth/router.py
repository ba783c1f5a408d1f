"""Authentication router: all /api/v1/auth/* endpoints."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from poketactix.auth.dependencies import get_current_user
from poketactix.auth.jwt import create_access_token
from poketactix.auth.password import PasswordStrengthError
from poketactix.auth.schemas import LoginRequest, RegisterRequest, RegisterResponse, TokenResponse
from poketactix.auth.service import authenticate_user, register_user
from poketactix.catalog.service import BaseCatalog
from poketactix.config import get_settings
from poketactix.db.models import User
from poketactix.dependencies import get_catalog, get_db
from poketactix.errors import WeakPasswordError
from poketactix.users.schemas import UserResponse

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])


def _token_for(user: User) -> tuple[str, int]:
    settings = get_settings()
    return create_access_token(user.id, user.username), settings.jwt_expire_minutes * 60


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    catalog: BaseCatalog = Depends(get_catalog),
) -> RegisterResponse:
    """Create an account, hand out a starter deck and issue an access token."""
    try:
        user, cards = await register_user(db, catalog, body.username, body.email, body.password)
    except PasswordStrengthError as e:
        raise WeakPasswordError(str(e)) from e
    await db.commit()

    token, expires_in = _token_for(user)
    return RegisterResponse(
        access_token=token,
        expires_in=expires_in,
        user=UserResponse.model_validate(user),
        starter_cards=len(cards),
    )


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)) -> TokenResponse:
    """Exchange username + password for an access token."""
    user = await authenticate_user(db, body.username, body.password)
    token, expires_in = _token_for(user)
    return TokenResponse(access_token=token, expires_in=expires_in, user=UserResponse.model_validate(user))


@router.get("/me", response_model=UserResponse)
async def me(user: User = Depends(get_current_user)) -> UserResponse:
    """Return the authenticated user."""
    return UserResponse.model_validate(user)
