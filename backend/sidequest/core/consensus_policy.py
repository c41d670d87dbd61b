"""Consensus Policy — how many beliefs a proof needs before its quest auto-completes.

Invariants:
    - required_beliefs is non-decreasing in complexity for a fixed level
    - required_beliefs is non-decreasing in author level for a fixed complexity
    - Result always in [BASE_BELIEFS[EASY], MAX_REQUIRED_BELIEFS]
    - Levels below 1 are treated as level 1

Design Decisions:
    - Step function over a smooth curve: players can reason about it
      ("every 5 levels, one more believer")
    - Hard cap keeps high-level players' quests completable in small lobbies
"""

from sidequest.core.domain_types import Complexity


BASE_BELIEFS: dict[Complexity, int] = {
    Complexity.EASY: 2,
    Complexity.MEDIUM: 3,
    Complexity.HARD: 4,
}
LEVEL_STEP = 5
MAX_REQUIRED_BELIEFS = 10


def required_beliefs(complexity: Complexity, level: int) -> int:
    """Beliefs needed to complete a quest of this complexity for an author at this level."""
    level = max(level, 1)
    return min(BASE_BELIEFS[complexity] + level // LEVEL_STEP, MAX_REQUIRED_BELIEFS)


def reaches_consensus(belief_count: int, complexity: Complexity, level: int) -> bool:
    return belief_count >= required_beliefs(complexity, level)
