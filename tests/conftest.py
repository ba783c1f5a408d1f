"""Shared test fixtures.

Every test gets a fresh in-memory SQLite database built through the real
``init_db`` / ``create_schema`` path, and a deterministic species catalog.
"""

from __future__ import annotations

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-secret-key-that-is-long-enough-for-hs256"
os.environ["LOG_FORMAT"] = "console"
os.environ["LOG_LEVEL"] = "WARNING"

import random  # noqa: E402
from collections.abc import AsyncGenerator, Awaitable, Callable, Iterable  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from poketactix.achievements.seed import seed_achievements  # noqa: E402
from poketactix.auth.jwt import create_access_token  # noqa: E402
from poketactix.auth.password import hash_password  # noqa: E402
from poketactix.catalog.rarity import classify  # noqa: E402
from poketactix.catalog.service import BaseCatalog, CatalogError, Move, Species  # noqa: E402
from poketactix.config import get_settings  # noqa: E402
from poketactix.database import close_db, create_schema, get_session, init_db  # noqa: E402
from poketactix.db.models import PlayerCard, User  # noqa: E402
from poketactix.dependencies import get_catalog  # noqa: E402
from poketactix.main import create_app  # noqa: E402
from poketactix.users.store import create_user  # noqa: E402

SPECIES_NAMES: dict[int, str] = {
    1: "bulbasaur",
    4: "charmander",
    7: "squirtle",
    25: "pikachu",
    133: "eevee",
    143: "snorlax",
    144: "articuno",
    150: "mewtwo",
    151: "mew",
    251: "celebi",
}


class FakeCatalog(BaseCatalog):
    """Deterministic catalog: id N resolves to SPECIES_NAMES[N] or ``pokemon-N``."""

    def __init__(
        self,
        failing: Iterable[int] = (),
        names: dict[int, str] | None = None,
        fixed_name: str | None = None,
    ) -> None:
        self.failing = set(failing)
        self.names = {**SPECIES_NAMES, **(names or {})}
        self.fixed_name = fixed_name
        self.calls: list[str | int] = []

    async def fetch_species(self, identifier: str | int) -> Species:
        self.calls.append(identifier)
        number = int(identifier)
        if number in self.failing:
            msg = f"species {identifier} unavailable"
            raise CatalogError(msg)
        name = self.fixed_name or self.names.get(number, f"pokemon-{number}")
        is_legendary, is_mythical = classify(name)
        return Species(
            name=name,
            hp=60,
            attack=50,
            defense=40,
            speed=30,
            types=["normal"],
            moves=[Move(name="tackle", power=40, stamina_cost=13, type="normal")],
            sprite=f"https://sprites.test/{name}.png",
            is_legendary=is_legendary,
            is_mythical=is_mythical,
        )


class SequenceRandom(random.Random):
    """Random source whose randint() replays a fixed sequence."""

    def __init__(self, values: Iterable[int]) -> None:
        super().__init__(0)
        self._values = iter(values)

    def randint(self, a: int, b: int) -> int:
        return next(self._values)


@pytest.fixture
def catalog() -> FakeCatalog:
    return FakeCatalog()


@pytest.fixture
def make_catalog() -> type[FakeCatalog]:
    return FakeCatalog


@pytest.fixture
def sequence_rng() -> type[SequenceRandom]:
    return SequenceRandom


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """A session on a freshly created in-memory schema."""
    get_settings.cache_clear()
    await init_db(get_settings())
    await create_schema()
    sessions = get_session()
    session = await sessions.__anext__()
    yield session
    await sessions.aclose()
    await close_db()


@pytest_asyncio.fixture
async def seeded_db(db_session: AsyncSession) -> AsyncSession:
    """Session with the default achievement catalog seeded."""
    await seed_achievements(db_session)
    return db_session


@pytest_asyncio.fixture
async def user(db_session: AsyncSession) -> User:
    created = await create_user(db_session, "ash", "ash@p.com", "not-a-real-hash")
    await db_session.commit()
    return created


@pytest.fixture
def make_card(db_session: AsyncSession) -> Callable[..., Awaitable[PlayerCard]]:
    """Factory inserting a card for a user; keyword overrides any column."""

    async def _make(user_id: int, **overrides: Any) -> PlayerCard:  # noqa: ANN401
        fields: dict[str, Any] = {
            "user_id": user_id,
            "pokemon_name": "pikachu",
            "level": 1,
            "xp": 0,
            "base_hp": 100,
            "base_attack": 50,
            "base_defense": 40,
            "base_speed": 90,
            "types": ["electric"],
            "moves": [{"name": "thunderbolt", "power": 90, "stamina_cost": 30, "type": "electric"}],
            "sprite": "",
            "is_legendary": False,
            "is_mythical": False,
            "in_deck": False,
            "deck_position": None,
        }
        fields.update(overrides)
        card = PlayerCard(**fields)
        db_session.add(card)
        await db_session.flush()
        return card

    return _make


@pytest_asyncio.fixture
async def client(catalog: FakeCatalog) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client against the app, with a seeded fresh database."""
    get_settings.cache_clear()
    app = create_app()
    app.dependency_overrides[get_catalog] = lambda: catalog

    await init_db(get_settings())
    await create_schema()
    sessions = get_session()
    session = await sessions.__anext__()
    await seed_achievements(session)
    await sessions.aclose()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await close_db()


async def register(client: AsyncClient, username: str = "ash", email: str = "ash@p.com") -> dict:
    response = await client.post("/api/v1/auth/register", json={
        "username": username,
        "email": email,
        "password": "Pikachu1!",
    })
    assert response.status_code == 201, response.text
    return response.json()


@pytest_asyncio.fixture
async def authed_client(client: AsyncClient) -> AsyncClient:
    """Client registered as ``ash`` (with a starter deck) and carrying its bearer token."""
    data = await register(client)
    client.headers["Authorization"] = f"Bearer {data['access_token']}"
    return client


@pytest.fixture
def register_user() -> Callable[..., Awaitable[dict]]:
    """Register another account through the API; returns the JSON body."""
    return register


@pytest.fixture
def token_for() -> Callable[[int, str], str]:
    return create_access_token


@pytest.fixture
def password_hash() -> str:
    return hash_password("Pikachu1!")
