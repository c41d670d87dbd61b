"""Quest Sampling — uniform sampling without replacement for daily assignments.

Invariants:
    - sample_without_replacement never returns duplicates or excluded items
    - Returns min(n, len(available)) items — a short pool yields a short list
    - Deterministic for a seeded RNG (tests inject random.Random(seed))
    - DAILY_COMPOSITION lists tiers in ascending difficulty order

Design Decisions:
    - Replaces ORDER BY RANDOM(): the pool is read by the service, the choice
      is made here with an injectable RNG so assignment is reproducible in tests
    - Pool is sorted before sampling: DB row order must not leak into the result
"""

import random
from collections.abc import Iterable, Sequence
from typing import TypeVar

from sidequest.core.domain_types import Complexity

T = TypeVar("T")

# 2 easy + 2 medium + 1 hard per day
DAILY_COMPOSITION: tuple[tuple[Complexity, int], ...] = (
    (Complexity.EASY, 2),
    (Complexity.MEDIUM, 2),
    (Complexity.HARD, 1),
)


def sample_without_replacement(
    pool: Iterable[T],
    n: int,
    excluded: Iterable[T] = (),
    rng: random.Random | None = None,
) -> list[T]:
    """Pick up to n distinct items from pool, skipping excluded ones."""
    if n <= 0:
        return []
    excluded_set = set(excluded)
    available = sorted({item for item in pool if item not in excluded_set}, key=str)
    rng = rng or random.Random()  # nosec B311
    return rng.sample(available, min(n, len(available)))


def composition_shortfall(
    requested: Sequence[tuple[Complexity, int]],
    picked: dict[Complexity, int],
) -> dict[Complexity, int]:
    """Tiers that could not be filled, mapped to how many quests are missing."""
    return {
        tier: count - picked.get(tier, 0)
        for tier, count in requested
        if picked.get(tier, 0) < count
    }
