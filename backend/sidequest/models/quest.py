"""Quest ORM — a seeded quest definition.

Invariants:
    - Immutable once seeded (no update paths in services/)
    - title is unique: seeding skips titles that already exist
    - complexity stores a Complexity value ("easy" | "medium" | "hard")
"""

import uuid

from sqlalchemy import String, Text, Integer
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from sidequest.core.domain_types import Complexity
from sidequest.db.base import Base


class Quest(Base):
    """Quest definition — title, tier, reward and target."""
    __tablename__ = "quests"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    complexity: Mapped[str] = mapped_column(
        String(10), nullable=False, default=Complexity.EASY.value, index=True,
    )
    xp_reward: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    validation_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default="community",
    )
    target_value: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
