"""Default achievement catalog, upserted by name on startup."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from poketactix.achievements.rules import RequirementType
from poketactix.db.base import insert_for
from poketactix.db.models import Achievement

logger = logging.getLogger(__name__)

ACHIEVEMENT_SEED_DATA: list[dict] = [
    {
        "name": "First Victory",
        "description": "Win your first battle",
        "icon": "\U0001f3c6",
        "requirement_type": RequirementType.TOTAL_WINS.value,
        "requirement_value": 1,
    },
    {
        "name": "Veteran Trainer",
        "description": "Win 10 battles",
        "icon": "⭐",
        "requirement_type": RequirementType.TOTAL_WINS.value,
        "requirement_value": 10,
    },
    {
        "name": "Elite Trainer",
        "description": "Win 50 battles",
        "icon": "\U0001f4ab",
        "requirement_type": RequirementType.TOTAL_WINS.value,
        "requirement_value": 50,
    },
    {
        "name": "Champion",
        "description": "Win 100 battles",
        "icon": "\U0001f451",
        "requirement_type": RequirementType.TOTAL_WINS.value,
        "requirement_value": 100,
    },
    {
        "name": "Legendary Collector",
        "description": "Obtain a legendary Pokemon",
        "icon": "\U0001f31f",
        "requirement_type": RequirementType.LEGENDARY_OWNED.value,
        "requirement_value": 1,
    },
    {
        "name": "Mythical Master",
        "description": "Obtain a mythical Pokemon",
        "icon": "✨",
        "requirement_type": RequirementType.MYTHICAL_OWNED.value,
        "requirement_value": 1,
    },
    {
        "name": "Max Level",
        "description": "Get a Pokemon to level 50",
        "icon": "\U0001f4c8",
        "requirement_type": RequirementType.MAX_LEVEL.value,
        "requirement_value": 50,
    },
    {
        "name": "Coin Hoarder",
        "description": "Accumulate 5000 coins",
        "icon": "\U0001f4b0",
        "requirement_type": RequirementType.COINS_TOTAL.value,
        "requirement_value": 5000,
    },
]


async def seed_achievements(db: AsyncSession) -> int:
    """Upsert the default achievements. Returns the number of entries seeded."""
    seeded = 0
    for data in ACHIEVEMENT_SEED_DATA:
        stmt = insert_for(db, Achievement).values(**data)
        stmt = stmt.on_conflict_do_update(
            index_elements=["name"],
            set_={
                "description": stmt.excluded.description,
                "icon": stmt.excluded.icon,
                "requirement_type": stmt.excluded.requirement_type,
                "requirement_value": stmt.excluded.requirement_value,
            },
        )
        await db.execute(stmt)
        seeded += 1

    await db.commit()
    logger.info("Seeded %d achievements", seeded)
    return seeded
