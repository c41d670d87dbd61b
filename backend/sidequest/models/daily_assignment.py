"""DailyAssignment ORM — one marker row per (user, day) that owns the day's quest set.

Invariants:
    - Primary key (user_id, assigned_date): a day is assigned at most once,
      whichever quests the competing requests sampled
    - Inserted in the same transaction as the day's status rows

Design Decisions:
    - Marker row instead of an advisory lock: works on every dialect, and the
      losing request gets an IntegrityError it already knows how to handle
"""

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import Date, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from sidequest.db.base import Base


class DailyAssignment(Base):
    __tablename__ = "daily_assignments"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    assigned_date: Mapped[date] = mapped_column(Date, primary_key=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
