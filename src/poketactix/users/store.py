"""User persistence: identity, uniqueness and the coin wallet."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import delete, exists, select, update
from sqlalchemy.exc import IntegrityError

from poketactix.db.models import User
from poketactix.errors import (
    DuplicateEmailError,
    DuplicateUsernameError,
    NotFoundError,
    StoreError,
    store_errors,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


@store_errors("create_user")
async def create_user(db: AsyncSession, username: str, email: str, password_hash: str) -> User:
    """
    Insert a new user with a zero coin balance.

    Uniqueness is enforced by the database at insert time; the
    ``*_exists`` helpers are only advisory pre-checks.

    Raises:
        DuplicateUsernameError: If the username is taken.
        DuplicateEmailError: If the email is taken.
    """
    user = User(username=username, email=email, password_hash=password_hash, coins=0)
    try:
        # A clash rolls back this insert only.
        async with db.begin_nested():
            db.add(user)
            await db.flush()
    except IntegrityError as e:
        detail = str(e.orig).lower()
        if "email" in detail:
            raise DuplicateEmailError(email) from e
        if "username" in detail:
            raise DuplicateUsernameError(username) from e
        msg = "create_user failed: integrity violation"
        raise StoreError(msg, operation="create_user") from e

    logger.info("user_created", user_id=user.id, username=username)
    return user


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


@store_errors("get_user_by_id")
async def get_user_by_id(db: AsyncSession, user_id: int) -> User:
    """Fetch a user by ID. Raises NotFoundError if absent."""
    result = await db.execute(
        select(User).where(User.id == user_id).execution_options(populate_existing=True)
    )
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFoundError("user", user_id)
    return user


@store_errors("get_user_by_username")
async def get_user_by_username(db: AsyncSession, username: str) -> User:
    """Fetch a user by exact (case-sensitive) username."""
    result = await db.execute(select(User).where(User.username == username))
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFoundError("user", username)
    return user


@store_errors("get_user_by_email")
async def get_user_by_email(db: AsyncSession, email: str) -> User:
    """Fetch a user by exact (case-sensitive) email."""
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFoundError("user", email)
    return user


@store_errors("username_exists")
async def username_exists(db: AsyncSession, username: str) -> bool:
    result = await db.execute(select(exists().where(User.username == username)))
    return bool(result.scalar())


@store_errors("email_exists")
async def email_exists(db: AsyncSession, email: str) -> bool:
    result = await db.execute(select(exists().where(User.email == email)))
    return bool(result.scalar())


# ---------------------------------------------------------------------------
# Wallet
# ---------------------------------------------------------------------------


@store_errors("update_coins")
async def update_coins(db: AsyncSession, user_id: int, coins: int) -> None:
    """Set the coin balance to an absolute value."""
    result = await db.execute(update(User).where(User.id == user_id).values(coins=coins))
    if result.rowcount == 0:
        raise NotFoundError("user", user_id)


@store_errors("add_coins")
async def add_coins(db: AsyncSession, user_id: int, amount: int) -> int:
    """
    Atomically add ``amount`` (possibly negative) to the balance.

    Returns the new balance. Callers guarantee the result stays non-negative;
    the ``users_coins_non_negative`` check rejects the write otherwise.
    """
    result = await db.execute(
        update(User)
        .where(User.id == user_id)
        .values(coins=User.coins + amount)
        .returning(User.coins)
    )
    coins = result.scalar_one_or_none()
    if coins is None:
        raise NotFoundError("user", user_id)
    return coins


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------


@store_errors("delete_user")
async def delete_user(db: AsyncSession, user_id: int) -> None:
    """Delete a user. Cards, stats, history and unlocks cascade in the database."""
    result = await db.execute(delete(User).where(User.id == user_id))
    if result.rowcount == 0:
        raise NotFoundError("user", user_id)
    logger.info("user_deleted", user_id=user_id)
