"""UserQuestStatus ORM — per-user, per-quest, per-day progress record.

Invariants:
    - Composite primary key (user_id, quest_id, assigned_date): created at most once
    - quest_status transitions follow core/state_transitions.QUEST_STATUS_TRANSITIONS
    - is_completed is True iff quest_status == "completed"

Design Decisions:
    - Journal queries outer-join quests and skip rows whose quest is gone
      instead of failing the whole read
"""

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import String, Integer, Boolean, Date, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from sidequest.core.domain_types import QuestStatus
from sidequest.db.base import Base


class UserQuestStatus(Base):
    """Projection row exposed to clients as the daily list and the journal."""
    __tablename__ = "user_quest_status"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    quest_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("quests.id", ondelete="CASCADE"),
        primary_key=True,
    )
    assigned_date: Mapped[date] = mapped_column(Date, primary_key=True)
    is_completed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    current_value: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    quest_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=QuestStatus.NOT_STARTED.value,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
