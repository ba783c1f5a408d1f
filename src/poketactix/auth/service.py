"""
Registration and login.

Credential checks stay here; the progression core only ever sees a user id.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from poketactix.auth.password import hash_password, validate_password_strength, verify_password
from poketactix.cards.service import generate_starter_deck
from poketactix.errors import (
    DuplicateEmailError,
    DuplicateUsernameError,
    InvalidCredentialsError,
    NotFoundError,
    StarterGenerationError,
)
from poketactix.users import store as user_store

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from poketactix.catalog.service import BaseCatalog
    from poketactix.db.models import PlayerCard, User

logger = structlog.get_logger()


async def register_user(
    db: AsyncSession,
    catalog: BaseCatalog,
    username: str,
    email: str,
    password: str,
) -> tuple[User, list[PlayerCard]]:
    """
    Create an account and try to hand out a starter deck.

    A starter deck failure is logged and leaves the account without cards;
    registration itself still succeeds.

    Raises:
        PasswordStrengthError: If the password is too weak.
        DuplicateUsernameError / DuplicateEmailError: If either is taken.
    """
    validate_password_strength(password)

    if await user_store.username_exists(db, username):
        raise DuplicateUsernameError(username)
    if await user_store.email_exists(db, email):
        raise DuplicateEmailError(email)

    user = await user_store.create_user(db, username, email, hash_password(password))

    cards: list[PlayerCard] = []
    try:
        cards = await generate_starter_deck(db, catalog, user.id)
    except StarterGenerationError as e:
        logger.warning("starter_deck_failed", user_id=user.id, error=str(e))

    logger.info("user_registered", user_id=user.id, username=username, starter_cards=len(cards))
    return user, cards


async def authenticate_user(db: AsyncSession, username: str, password: str) -> User:
    """Check a username/password pair. Raises InvalidCredentialsError on any mismatch."""
    try:
        user = await user_store.get_user_by_username(db, username)
    except NotFoundError:
        user = None

    if user is None or not verify_password(password, user.password_hash):
        logger.info("login_failed", username=username)
        msg = "Invalid username or password"
        raise InvalidCredentialsError(msg)

    logger.info("user_logged_in", user_id=user.id)
    return user
