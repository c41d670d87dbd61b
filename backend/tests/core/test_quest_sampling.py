"""Quest Sampling — verifies sampling without replacement and shortfall reporting."""

import random

from sidequest.core.domain_types import Complexity
from sidequest.core.quest_sampling import (
    DAILY_COMPOSITION, composition_shortfall, sample_without_replacement,
)


def test_daily_composition_is_two_two_one():
    assert DAILY_COMPOSITION == (
        (Complexity.EASY, 2), (Complexity.MEDIUM, 2), (Complexity.HARD, 1),
    )


def test_sample_has_no_duplicates():
    picked = sample_without_replacement(range(20), 10, rng=random.Random(1))
    assert len(picked) == 10
    assert len(set(picked)) == 10


def test_sample_skips_excluded():
    for seed in range(20):
        picked = sample_without_replacement(
            [1, 2, 3, 4], 2, excluded=[1, 2], rng=random.Random(seed),
        )
        assert sorted(picked) == [3, 4]


def test_short_pool_yields_short_list():
    assert sorted(sample_without_replacement(["a"], 3)) == ["a"]
    assert sample_without_replacement([], 2) == []


def test_non_positive_n_yields_empty():
    assert sample_without_replacement([1, 2, 3], 0) == []


def test_same_seed_same_result_regardless_of_pool_order():
    a = sample_without_replacement(["q1", "q2", "q3", "q4"], 2, rng=random.Random(7))
    b = sample_without_replacement(["q4", "q3", "q2", "q1"], 2, rng=random.Random(7))
    assert a == b


def test_shortfall_lists_missing_tiers():
    picked = {Complexity.EASY: 2, Complexity.MEDIUM: 1}
    assert composition_shortfall(DAILY_COMPOSITION, picked) == {
        Complexity.MEDIUM: 1, Complexity.HARD: 1,
    }


def test_no_shortfall_when_full():
    picked = {tier: n for tier, n in DAILY_COMPOSITION}
    assert composition_shortfall(DAILY_COMPOSITION, picked) == {}
