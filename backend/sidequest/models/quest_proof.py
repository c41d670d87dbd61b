"""QuestProof ORM — persists a user's evidence for one quest attempt.

Invariants:
    - status transitions follow core/state_transitions.PROOF_TRANSITIONS
    - belief_count == number of quest_proof_beliefs rows for this proof, never negative
    - photo_keys/voice_keys hold storage keys only, never URLs
    - assigned_date is fixed at submission: the day whose status row this proof answers

Design Decisions:
    - belief_count denormalized: feed and details read it without COUNT(*)
      (kept exact by an in-SQL increment inside the toggle transaction)
    - JSON lists for keys: a proof has at most a handful of files
"""

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import (
    String, Text, Integer, Date, DateTime, JSON, ForeignKey, CheckConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from sidequest.core.domain_types import ProofStatus
from sidequest.db.base import Base


class QuestProof(Base):
    """Proof of completion — text, photo keys and voice keys for a quest."""
    __tablename__ = "quest_proofs"
    __table_args__ = (
        CheckConstraint("belief_count >= 0", name="ck_quest_proofs_belief_count"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    quest_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("quests.id", ondelete="CASCADE"),
        nullable=False,
    )
    assigned_date: Mapped[date] = mapped_column(Date, nullable=False)
    proof_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    photo_keys: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    voice_keys: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ProofStatus.UPLOADING.value,
    )
    belief_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
