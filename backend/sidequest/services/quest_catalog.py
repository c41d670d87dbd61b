"""Quest Catalog — seeded quest definitions: create, list, find, seed from JSON.

Invariants:
    - Quests are never updated after creation
    - Titles are unique: create_quest rejects a duplicate with ValidationFailureError
    - seed_quests is idempotent by title: existing titles are skipped
    - Seed files are validated as a whole before anything is inserted

Design Decisions:
    - Pydantic TypeAdapter for the seed file: same validation as POST /quests
"""

import logging
from collections.abc import Iterable
from pathlib import Path
from uuid import UUID

from pydantic import TypeAdapter
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sidequest.core.domain_types import Complexity
from sidequest.core.errors import ValidationFailureError
from sidequest.models.quest import Quest
from sidequest.schemas.quest import QuestSeed

logger = logging.getLogger(__name__)

_SEED_LIST = TypeAdapter(list[QuestSeed])


def load_quest_seeds(path: str | Path) -> list[QuestSeed]:
    """Parse and validate a JSON array of quest seeds."""
    return _SEED_LIST.validate_json(Path(path).read_text(encoding="utf-8"))


class QuestCatalogService:
    """Read access to the catalog plus seeding."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_quest(self, seed: QuestSeed) -> Quest:
        quest = _quest_from_seed(seed)
        try:
            existing = await self.db.execute(
                select(Quest.id).where(Quest.title == seed.title)
            )
            if existing.first() is not None:
                raise ValidationFailureError(
                    f"Quest '{seed.title}' already exists",
                    code="DUPLICATE_QUEST", field="title",
                )
            self.db.add(quest)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        logger.info(f"Quest created: {quest.title}", extra={"quest_id": quest.id})
        return quest

    async def list_quests(self, complexity: Complexity | None = None) -> list[Quest]:
        query = select(Quest).order_by(Quest.title)
        if complexity is not None:
            query = query.where(Quest.complexity == complexity.value)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def find_quest(self, quest_id: UUID) -> Quest | None:
        return await self.db.get(Quest, quest_id)

    async def seed_quests(self, seeds: Iterable[QuestSeed]) -> int:
        """Insert seeds whose title is new. Returns how many were inserted."""
        try:
            result = await self.db.execute(select(Quest.title))
            known = set(result.scalars().all())
            inserted = 0
            for seed in seeds:
                if seed.title in known:
                    logger.debug(f"Skipping quest seed '{seed.title}' (already exists)")
                    continue
                self.db.add(_quest_from_seed(seed))
                known.add(seed.title)
                inserted += 1
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        logger.info(f"Quest catalog seeded: {inserted} new quest(s)")
        return inserted


def _quest_from_seed(seed: QuestSeed) -> Quest:
    return Quest(
        title=seed.title,
        description=seed.description,
        complexity=seed.complexity.value,
        xp_reward=seed.xp_reward,
        validation_type=seed.validation_type,
        target_value=seed.target_value,
    )
