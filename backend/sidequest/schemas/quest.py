"""Quest Schemas — catalog seeds, quest views, daily list and journal entries.

Invariants:
    - complexity accepted case-insensitively ("Hard" == "hard")
    - QuestStatusResponse.completed_at is set iff is_completed
"""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sidequest.core.domain_types import Complexity, QuestStatus


class QuestSeed(BaseModel):
    """One catalog entry from a seed file or POST /quests."""
    title: str = Field(min_length=3, max_length=200)
    description: str | None = Field(None, max_length=2000)
    complexity: Complexity = Complexity.EASY
    xp_reward: int = Field(10, ge=0)
    validation_type: str = Field("community", max_length=20)
    target_value: int = Field(1, ge=1)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title cannot be empty or whitespace")
        return v

    @field_validator("complexity", mode="before")
    @classmethod
    def lower_complexity(cls, v):
        return v.lower() if isinstance(v, str) else v


class QuestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    description: str | None
    complexity: Complexity
    xp_reward: int
    validation_type: str
    target_value: int


class QuestStatusResponse(BaseModel):
    """A status row joined to its quest — daily list item and journal entry."""
    user_id: UUID
    quest: QuestResponse
    assigned_date: date
    status: QuestStatus
    current_value: int
    is_completed: bool
    completed_at: datetime | None = None


class DailyQuestsResponse(BaseModel):
    date: date
    quests: list[QuestStatusResponse]
