"""Daily Assignment Selector — returns or lazily creates a user's quests for one day.

Invariants:
    - At most one status row per (user, quest, day): composite primary key
    - At most one assignment per (user, day): the DailyAssignment marker row is
      inserted before sampling, so two racing first calls that sample
      different quests still collide on the marker
    - If any row exists for (user, day) the existing set is returned untouched
    - New days get DAILY_COMPOSITION (2 easy, 2 medium, 1 hard) with
      quest_status = not_started, current_value = 0
    - A tier with too few quests yields a short list (logged), never an error
    - Losing a concurrent insert race (marker or status row) returns the
      winner's set, not an error

Design Decisions:
    - Sampling happens in core/quest_sampling with an injectable RNG instead of
      ORDER BY RANDOM(): reproducible in tests, portable across dialects
    - Result ordered by (tier, title): both the first and the repeat call
      return the same sequence
"""

import logging
import random
from collections.abc import Iterable
from datetime import date
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from sidequest.core.domain_types import Complexity, QuestStatus
from sidequest.core.errors import ConcurrencyError, ErrorContext
from sidequest.core.quest_sampling import (
    DAILY_COMPOSITION, composition_shortfall, sample_without_replacement,
)
from sidequest.models.daily_assignment import DailyAssignment
from sidequest.models.quest import Quest
from sidequest.models.user_quest_status import UserQuestStatus

logger = logging.getLogger(__name__)

DailyQuest = tuple[Quest, UserQuestStatus]


def _ordered(pairs: Iterable[DailyQuest]) -> list[DailyQuest]:
    return sorted(
        pairs, key=lambda p: (Complexity(p[0].complexity).rank, p[0].title),
    )


class DailyAssignmentService:
    """get_or_assign: idempotent per (user, day)."""

    def __init__(self, db: AsyncSession, rng: random.Random | None = None):
        self.db = db
        self.rng = rng or random.Random()  # nosec B311

    async def get_or_assign(
        self,
        user_id: UUID,
        day: date,
        exclude_quest_ids: Iterable[UUID] = (),
    ) -> list[DailyQuest]:
        try:
            existing = await self._load_day(user_id, day)
            if existing is not None:
                return existing

            # Claim the day first: a concurrent first call blocks or fails here
            self.db.add(DailyAssignment(user_id=user_id, assigned_date=day))
            await self.db.flush()

            picked = await self._pick_quests(set(exclude_quest_ids))
            rows = [
                UserQuestStatus(
                    user_id=user_id,
                    quest_id=quest.id,
                    assigned_date=day,
                    is_completed=False,
                    current_value=0,
                    quest_status=QuestStatus.NOT_STARTED.value,
                )
                for quest in picked
            ]
            self.db.add_all(rows)
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.info(
                "Concurrent daily assignment detected, returning existing set",
                extra={"user_id": user_id, "assigned_date": day},
            )
            return await self._load_after_race(user_id, day)
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            f"Assigned {len(rows)} quest(s) for {day.isoformat()}",
            extra={"user_id": user_id, "assigned_date": day},
        )
        return _ordered(zip(picked, rows))

    async def _load_day(
        self, user_id: UUID, day: date,
    ) -> list[DailyQuest] | None:
        """Existing (quest, status) pairs for the day, or None if nothing was assigned yet."""
        result = await self.db.execute(
            select(UserQuestStatus, Quest)
            .outerjoin(Quest, Quest.id == UserQuestStatus.quest_id)
            .where(UserQuestStatus.user_id == user_id)
            .where(UserQuestStatus.assigned_date == day)
        )
        rows = result.all()
        if not rows:
            return None
        return _ordered(
            (quest, status) for status, quest in rows if quest is not None
        )

    async def _load_after_race(
        self, user_id: UUID, day: date,
    ) -> list[DailyQuest]:
        existing = await self._load_day(user_id, day)
        if existing is None:
            raise ConcurrencyError(
                "Daily assignment conflicted but no assignment was found",
                ErrorContext(user_id=str(user_id)),
            )
        return existing

    async def _pick_quests(self, excluded: set[UUID]) -> list[Quest]:
        picked: list[Quest] = []
        counts: dict[Complexity, int] = {}
        for tier, wanted in DAILY_COMPOSITION:
            result = await self.db.execute(
                select(Quest).where(Quest.complexity == tier.value)
            )
            pool = {quest.id: quest for quest in result.scalars().all()}
            chosen = sample_without_replacement(pool, wanted, excluded, self.rng)
            picked.extend(pool[quest_id] for quest_id in chosen)
            counts[tier] = len(chosen)

        shortfall = composition_shortfall(DAILY_COMPOSITION, counts)
        if shortfall:
            missing = ", ".join(f"{t.value}={n}" for t, n in shortfall.items())
            logger.warning(f"Quest catalog too small for daily composition ({missing})")
        return picked
