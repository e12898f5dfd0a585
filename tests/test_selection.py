"""
Test suite for the bounded selection used to pick superspreaders and deaths.

Tests cover:
- Filling a BoundedExtremalSet while capacity remains
- Border replacement once capacity is exhausted (both directions)
- Reset and seeding behaviour
- Capacity computation from a population fraction
"""

import pytest

from cvoa.epidemic.individual import Individual
from cvoa.epidemic.selection import (
    BoundedExtremalSet,
    DEATH_POLICY,
    SUPERSPREADER_POLICY,
    required_capacity,
)


def make_individual(bits: str, fitness: float) -> Individual:
    return Individual(data=tuple(int(c) for c in bits), fitness=fitness)


class TestSuperspreaderSelection:
    """Border tracks the worst retained member."""

    def test_sentinel_is_best_possible(self):
        selection = BoundedExtremalSet(SUPERSPREADER_POLICY)
        assert selection.border.fitness == float('-inf')
        assert len(selection) == 0

    def test_fill_tracks_worst_member(self):
        selection = BoundedExtremalSet(SUPERSPREADER_POLICY)
        a = make_individual('0001', 3.0)
        b = make_individual('0010', 5.0)

        assert selection.try_insert(a, 2) is True
        assert selection.border == a
        assert selection.try_insert(b, 1) is True
        assert selection.border == b
        assert selection.members() == [a, b]

    def test_fill_keeps_border_for_better_arrival(self):
        selection = BoundedExtremalSet(SUPERSPREADER_POLICY)
        a = make_individual('0001', 5.0)
        b = make_individual('0010', 3.0)

        selection.try_insert(a, 2)
        selection.try_insert(b, 1)

        assert selection.border == a
        assert len(selection) == 2

    def test_full_set_rejects_less_extreme_candidate(self):
        selection = BoundedExtremalSet(SUPERSPREADER_POLICY)
        a = make_individual('0001', 3.0)
        b = make_individual('0010', 5.0)
        c = make_individual('0100', 4.0)
        selection.try_insert(a, 2)
        selection.try_insert(b, 1)

        assert selection.try_insert(c, 0) is False
        assert c not in selection
        assert selection.border == b

    def test_full_set_rejects_equal_candidate(self):
        selection = BoundedExtremalSet(SUPERSPREADER_POLICY)
        a = make_individual('0001', 5.0)
        b = make_individual('0010', 5.0)
        selection.try_insert(a, 1)

        assert selection.try_insert(b, 0) is False
        assert selection.border == a

    def test_replacement_evicts_border(self):
        selection = BoundedExtremalSet(SUPERSPREADER_POLICY)
        a = make_individual('0001', 3.0)
        b = make_individual('0010', 5.0)
        d = make_individual('1000', 7.0)
        selection.try_insert(a, 2)
        selection.try_insert(b, 1)

        prior_border = selection.border
        assert selection.try_insert(d, 0) is True

        assert selection.border == d
        assert prior_border not in selection
        assert set(selection.members()) == {a, d}
        assert len(selection) == 2


class TestDeathSelection:
    """Border tracks the best (least bad) retained member."""

    def test_sentinel_is_worst_possible(self):
        selection = BoundedExtremalSet(DEATH_POLICY)
        assert selection.border.fitness == float('inf')

    def test_fill_tracks_best_member(self):
        selection = BoundedExtremalSet(DEATH_POLICY)
        a = make_individual('0001', 3.0)
        b = make_individual('0010', 5.0)

        selection.try_insert(a, 2)
        selection.try_insert(b, 1)

        assert selection.border == a
        assert selection.members() == [a, b]

    def test_full_set_rejects_worse_candidate(self):
        selection = BoundedExtremalSet(DEATH_POLICY)
        a = make_individual('0001', 3.0)
        b = make_individual('0010', 5.0)
        c = make_individual('0100', 4.0)
        selection.try_insert(a, 2)
        selection.try_insert(b, 1)

        assert selection.try_insert(c, 0) is False
        assert selection.border == a

    def test_replacement_evicts_border(self):
        selection = BoundedExtremalSet(DEATH_POLICY)
        a = make_individual('0001', 3.0)
        b = make_individual('0010', 5.0)
        d = make_individual('1000', 1.0)
        selection.try_insert(a, 2)
        selection.try_insert(b, 1)

        assert selection.try_insert(d, 0) is True

        assert selection.border == d
        assert a not in selection
        assert set(selection.members()) == {b, d}

    def test_successive_replacements(self):
        """Every successful replacement makes the newcomer the border."""
        selection = BoundedExtremalSet(DEATH_POLICY)
        selection.try_insert(make_individual('0000', 9.0), 1)

        for i, fitness in enumerate([8.0, 6.0, 2.0]):
            candidate = make_individual(format(i + 1, '04b'), fitness)
            prior_border = selection.border
            assert selection.try_insert(candidate, 0) is True
            assert selection.border == candidate
            assert prior_border not in selection
            assert len(selection) == 1


class TestBoundedExtremalSetLifecycle:
    """Test reset, seed and duplicate handling."""

    def test_duplicate_insert_does_not_count(self):
        selection = BoundedExtremalSet(SUPERSPREADER_POLICY)
        a = make_individual('0101', 2.0)

        assert selection.try_insert(a, 2) is True
        assert selection.try_insert(a, 1) is False
        assert len(selection) == 1

    def test_reset_restores_sentinel(self):
        selection = BoundedExtremalSet(DEATH_POLICY)
        selection.try_insert(make_individual('0101', 2.0), 1)

        selection.reset()

        assert len(selection) == 0
        assert selection.border.fitness == float('inf')

    def test_seed_leaves_border_untouched(self):
        selection = BoundedExtremalSet(SUPERSPREADER_POLICY)
        a = make_individual('0101', 2.0)

        selection.seed(a)

        assert a in selection
        assert selection.border.fitness == float('-inf')

    def test_iteration_is_insertion_ordered(self):
        selection = BoundedExtremalSet(SUPERSPREADER_POLICY)
        individuals = [make_individual(format(i, '03b'), float(i)) for i in range(5)]
        for remaining, individual in zip(range(5, 0, -1), individuals):
            selection.try_insert(individual, remaining)

        assert list(selection) == individuals


class TestRequiredCapacity:
    """Test capacity rounding."""

    @pytest.mark.parametrize("fraction,population,expected", [
        (0.1, 5, 1),
        (0.25, 8, 2),
        (0.3, 7, 3),
        (0.0, 10, 0),
        (1.0, 7, 7),
        (0.5, 1, 1),
    ])
    def test_rounds_up(self, fraction, population, expected):
        assert required_capacity(fraction, population) == expected
