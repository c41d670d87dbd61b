"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Enum-valued columns store the str Enum value (core/domain_types.py)

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata knows every table before
      create_all or an Alembic autogenerate runs
"""

from sidequest.models.user import User  # noqa: F401
from sidequest.models.quest import Quest  # noqa: F401
from sidequest.models.quest_proof import QuestProof  # noqa: F401
from sidequest.models.belief import Belief  # noqa: F401
from sidequest.models.user_quest_status import UserQuestStatus  # noqa: F401
from sidequest.models.daily_assignment import DailyAssignment  # noqa: F401
