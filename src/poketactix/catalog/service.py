"""
Pokemon catalog adapter with provider abstraction.

The progression core only sees :class:`BaseCatalog`; the production
implementation talks to PokeAPI over httpx.
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

import httpx
import structlog

from poketactix.catalog.rarity import classify
from poketactix.config import get_settings

logger = structlog.get_logger()

# PokeAPI ids above this are regional forms and later generations.
MAX_SPECIES_ID = 898


class CatalogError(Exception):
    """Raised when a species cannot be resolved."""


@dataclass(frozen=True)
class Move:
    name: str
    power: int
    stamina_cost: int
    type: str

    def as_dict(self) -> dict[str, Any]:
        return {"name": self.name, "power": self.power, "stamina_cost": self.stamina_cost, "type": self.type}


DEFAULT_MOVE = Move(name="tackle", power=40, stamina_cost=13, type="normal")


@dataclass(frozen=True)
class Species:
    """Catalog entry resolved from a name or numeric id."""

    name: str
    hp: int
    attack: int
    defense: int
    speed: int
    types: list[str] = field(default_factory=list)
    moves: list[Move] = field(default_factory=list)
    sprite: str = ""
    is_legendary: bool = False
    is_mythical: bool = False

    @property
    def is_rare(self) -> bool:
        return self.is_legendary or self.is_mythical


class BaseCatalog(ABC):
    """Abstract species source."""

    @abstractmethod
    async def fetch_species(self, identifier: str | int) -> Species:
        """Resolve a species by name or id. Raises CatalogError on any failure."""
        ...


class PokeAPICatalog(BaseCatalog):
    """Resolve species against the public PokeAPI."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        max_moves: int = 4,
        rng: random.Random | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_moves = max_moves
        self.rng = rng or random.Random()
        self.transport = transport

    async def fetch_species(self, identifier: str | int) -> Species:
        """Fetch a species and up to ``max_moves`` damaging moves."""
        key = str(identifier).strip().lower()
        url = f"{self.base_url}/pokemon/{key}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(url)
                if response.status_code != 200:
                    msg = f'Pokemon "{identifier}" not found (HTTP {response.status_code})'
                    raise CatalogError(msg)
                data = response.json()
                if not isinstance(data, dict):
                    msg = f"malformed pokemon payload for {identifier!r}: expected an object"
                    raise CatalogError(msg)
                raw_moves = data.get("moves")
                moves = await self._pick_moves(client, raw_moves if isinstance(raw_moves, list) else [])
        except httpx.HTTPError as e:
            msg = f"failed to fetch pokemon {identifier!r}: {e}"
            raise CatalogError(msg) from e
        except ValueError as e:
            msg = f"failed to decode pokemon {identifier!r}: {e}"
            raise CatalogError(msg) from e

        return _species_from_payload(data, moves)

    async def _pick_moves(self, client: httpx.AsyncClient, raw_moves: list[Any]) -> list[Move]:
        """Visit move URLs in random order, keeping those with positive power."""
        urls = [
            m["move"]["url"]
            for m in raw_moves
            if isinstance(m, dict) and isinstance(m.get("move"), dict) and m["move"].get("url")
        ]
        self.rng.shuffle(urls)

        picked: list[Move] = []
        for move_url in urls:
            if len(picked) >= self.max_moves:
                break
            try:
                response = await client.get(move_url)
                response.raise_for_status()
                move = response.json()
            except (httpx.HTTPError, ValueError):
                logger.debug("move_fetch_skipped", url=move_url)
                continue
            if not isinstance(move, dict):
                continue
            power = move.get("power") or 0
            if not isinstance(power, int) or power <= 0:
                continue
            picked.append(Move(
                name=move.get("name", "unknown"),
                power=power,
                stamina_cost=power // 3,
                type=move["type"].get("name", "normal") if isinstance(move.get("type"), dict) else "normal",
            ))

        return picked or [DEFAULT_MOVE]


def _species_from_payload(data: dict[str, Any], moves: list[Move]) -> Species:
    try:
        name = data["name"]
        if not isinstance(name, str):
            msg = f"name is {type(name).__name__}"
            raise TypeError(msg)
        base = {s["stat"]["name"]: int(s["base_stat"]) for s in data["stats"]}
        hp, attack, defense, speed = base["hp"], base["attack"], base["defense"], base["speed"]
        types = [t["type"]["name"] for t in sorted(data.get("types") or [], key=lambda t: t.get("slot", 0))]
    except (KeyError, TypeError, AttributeError, ValueError) as e:
        msg = f"malformed pokemon payload: {e.__class__.__name__} {e}"
        raise CatalogError(msg) from e

    is_legendary, is_mythical = classify(name)
    return Species(
        name=name,
        # Cards get a 50% HP bonus over the species base stat.
        hp=hp + hp // 2,
        attack=attack,
        defense=defense,
        speed=speed,
        types=types,
        moves=moves,
        sprite=(data.get("sprites") or {}).get("front_default") or "",
        is_legendary=is_legendary,
        is_mythical=is_mythical,
    )


@lru_cache
def get_catalog() -> BaseCatalog:
    """Build the configured catalog (FastAPI dependency, cached per process)."""
    settings = get_settings()
    return PokeAPICatalog(
        base_url=settings.pokeapi_base_url,
        timeout=settings.pokeapi_timeout_seconds,
        max_moves=settings.pokeapi_max_moves,
    )
