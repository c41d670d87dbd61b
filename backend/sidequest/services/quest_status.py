"""Quest Status Projection — journal reads and the shared completion helper.

Invariants:
    - complete_quest is the ONLY code path that writes quest_status = completed
      (moderation approval and belief consensus both funnel through it)
    - complete_quest is idempotent: an already-completed row is returned unchanged
    - complete_quest and advance_status never commit — they join the caller's transaction
    - finish_quest (explicit path) rejects an already-completed quest with
      QuestAlreadyCompletedError and commits on success
    - Journal rows whose quest no longer exists are skipped, never fatal

Design Decisions:
    - Status rows are read with FOR UPDATE before any write: concurrent
      completion attempts for one row serialize on the row lock
    - advance_status asks the transition table first and skips illegal moves:
      confirm must not drag a completed day back to in_pending
"""

import logging
from datetime import date
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sidequest.core.calendar import utc_now
from sidequest.core.domain_types import QuestStatus
from sidequest.core.errors import (
    ErrorContext, QuestAlreadyCompletedError, ResourceNotFoundError,
)
from sidequest.core.state_transitions import (
    can_transition_quest_status, check_quest_status_transition,
)
from sidequest.models.quest import Quest
from sidequest.models.user_quest_status import UserQuestStatus

logger = logging.getLogger(__name__)


class QuestStatusService:
    """Per-(user, quest, day) status reads and transitions."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_status(
        self, user_id: UUID, quest_id: UUID, day: date, *, for_update: bool = False,
    ) -> UserQuestStatus | None:
        query = (
            select(UserQuestStatus)
            .where(UserQuestStatus.user_id == user_id)
            .where(UserQuestStatus.quest_id == quest_id)
            .where(UserQuestStatus.assigned_date == day)
            .execution_options(populate_existing=True)
        )
        if for_update:
            query = query.with_for_update()
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_status(
        self, user_id: UUID, quest_id: UUID, day: date,
    ) -> UserQuestStatus:
        status = await self.find_status(user_id, quest_id, day)
        if status is None:
            raise ResourceNotFoundError(
                "UserQuestStatus", f"{user_id}/{quest_id}/{day.isoformat()}",
                ErrorContext(user_id=str(user_id), quest_id=str(quest_id)),
            )
        return status

    async def complete_quest(
        self, user_id: UUID, quest_id: UUID, day: date, *, missing_ok: bool = False,
    ) -> UserQuestStatus | None:
        """Mark the day's status completed. Idempotent; does not commit."""
        status = await self.find_status(user_id, quest_id, day, for_update=True)
        if status is None:
            if missing_ok:
                logger.warning(
                    "No quest status row to complete",
                    extra={"user_id": user_id, "quest_id": quest_id, "assigned_date": day},
                )
                return None
            raise ResourceNotFoundError(
                "UserQuestStatus", f"{user_id}/{quest_id}/{day.isoformat()}",
                ErrorContext(user_id=str(user_id), quest_id=str(quest_id)),
            )

        current = QuestStatus(status.quest_status)
        if current is QuestStatus.COMPLETED:
            return status
        check_quest_status_transition(current, QuestStatus.COMPLETED)

        status.quest_status = QuestStatus.COMPLETED.value
        status.is_completed = True
        status.updated_at = utc_now()
        await self.db.flush()
        logger.info(
            f"Quest {quest_id} completed for user {user_id}",
            extra={"user_id": user_id, "quest_id": quest_id, "assigned_date": day},
        )
        return status

    async def advance_status(
        self, user_id: UUID, quest_id: UUID, day: date, target: QuestStatus,
    ) -> UserQuestStatus | None:
        """Move the day's status to target if the table allows it; otherwise leave it."""
        status = await self.find_status(user_id, quest_id, day, for_update=True)
        if status is None:
            logger.warning(
                f"No quest status row to move to {target.value}",
                extra={"user_id": user_id, "quest_id": quest_id, "assigned_date": day},
            )
            return None
        if not can_transition_quest_status(QuestStatus(status.quest_status), target):
            return status
        status.quest_status = target.value
        status.updated_at = utc_now()
        await self.db.flush()
        return status

    async def finish_quest(
        self, user_id: UUID, quest_id: UUID, day: date,
    ) -> UserQuestStatus:
        """Explicit completion requested by the client."""
        ctx = ErrorContext(user_id=str(user_id), quest_id=str(quest_id))
        try:
            if await self.db.get(Quest, quest_id) is None:
                raise ResourceNotFoundError("Quest", str(quest_id), ctx)
            status = await self.get_status(user_id, quest_id, day)
            if QuestStatus(status.quest_status) is QuestStatus.COMPLETED:
                raise QuestAlreadyCompletedError(ctx)
            status = await self.complete_quest(user_id, quest_id, day)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        return status

    async def get_user_journal(
        self, user_id: UUID,
    ) -> list[tuple[UserQuestStatus, Quest]]:
        """All status rows of a user joined to their quests, newest day first."""
        result = await self.db.execute(
            select(UserQuestStatus, Quest)
            .outerjoin(Quest, Quest.id == UserQuestStatus.quest_id)
            .where(UserQuestStatus.user_id == user_id)
            .order_by(
                UserQuestStatus.assigned_date.desc(),
                UserQuestStatus.updated_at.desc(),
            )
        )
        journal = []
        skipped = 0
        for status, quest in result.all():
            if quest is None:
                skipped += 1
                continue
            journal.append((status, quest))
        if skipped:
            logger.debug(
                f"Journal skipped {skipped} row(s) with a missing quest",
                extra={"user_id": user_id},
            )
        return journal
