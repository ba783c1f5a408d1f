"""User account router: /api/v1/users/me."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from poketactix.auth.dependencies import get_current_user
from poketactix.db.models import User
from poketactix.dependencies import get_db
from poketactix.stats.router import stats_response
from poketactix.stats.store import get_or_create_stats
from poketactix.users.schemas import CurrentUserResponse, UserResponse
from poketactix.users.store import delete_user

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


@router.get("/me", response_model=CurrentUserResponse)
async def get_me(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> CurrentUserResponse:
    """Current account with its aggregate stats."""
    stats = await get_or_create_stats(db, user.id)
    await db.commit()
    return CurrentUserResponse(user=UserResponse.model_validate(user), stats=stats_response(stats))


@router.delete("/me", status_code=204)
async def delete_me(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Response:
    """Delete the account and everything it owns."""
    await delete_user(db, user.id)
    await db.commit()
    return Response(status_code=204)
