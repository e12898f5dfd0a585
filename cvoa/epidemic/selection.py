"""
Selection mechanisms for CVOA.

This module implements the bounded selection used every iteration to pick
superspreaders and deaths out of the infected population:
- BoundedExtremalSet: capacity-bounded set with a tracked border element
- SelectionPolicy: direction in which the border is tracked
- SUPERSPREADER_POLICY / DEATH_POLICY: the two opposite configurations
"""

import logging
import math
from dataclasses import dataclass
from typing import Callable, Iterator, List

from .individual import Individual, WORSE, BETTER

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectionPolicy:
    """
    Direction strategy for a BoundedExtremalSet.

    Attributes:
        name: Label used in logs
        sentinel: Factory for the initial border value
        more_extreme: Predicate ``(candidate, border) -> bool``; True when the
                      candidate should take the border's place
    """
    name: str
    sentinel: Callable[[], Individual]
    more_extreme: Callable[[Individual, Individual], bool]


# Border is the worst retained superspreader. Starts at the best possible
# value so the first arrival always becomes the border.
SUPERSPREADER_POLICY = SelectionPolicy(
    name='superspreader',
    sentinel=lambda: Individual.extreme(worst=False),
    more_extreme=lambda candidate, border: candidate.compare_to(border) == WORSE,
)

# Border is the best (least bad) retained death. Starts at the worst
# possible value.
DEATH_POLICY = SelectionPolicy(
    name='death',
    sentinel=lambda: Individual.extreme(worst=True),
    more_extreme=lambda candidate, border: candidate.compare_to(border) == BETTER,
)


class BoundedExtremalSet:
    """
    Fixed-capacity selection of individuals with a tracked border element.

    The caller owns the remaining-capacity counter and passes it to every
    insertion attempt. While capacity remains, every candidate is inserted;
    once it is exhausted, a candidate only gets in by displacing the border.

    Attributes:
        policy: Direction strategy (see SelectionPolicy)
        border: Current border element (the sentinel until the first insert)
    """

    def __init__(self, policy: SelectionPolicy):
        self.policy = policy
        self._members: dict = {}
        self.border: Individual = policy.sentinel()

    def reset(self) -> None:
        """Drop all members and restore the sentinel border."""
        self._members.clear()
        self.border = self.policy.sentinel()

    def seed(self, individual: Individual) -> None:
        """Unconditionally add an individual without touching the border."""
        self._members[individual] = None

    def try_insert(self, candidate: Individual, remaining: int) -> bool:
        """
        Attempt to insert a candidate.

        Args:
            candidate: Individual to insert
            remaining: Remaining capacity before this insertion

        Returns:
            True if the candidate was added to the set, False otherwise
        """
        more_extreme = self.policy.more_extreme(candidate, self.border)

        if remaining > 0:
            inserted = candidate not in self._members
            self._members[candidate] = None
            if more_extreme:
                self.border = candidate
            return inserted

        if not more_extreme:
            return False

        evicted = self.border
        self._members.pop(evicted, None)
        inserted = candidate not in self._members
        self._members[candidate] = None
        self.border = candidate
        logger.debug(f"{self.policy.name}: replaced border {evicted} with {candidate}")
        return inserted

    def members(self) -> List[Individual]:
        """Members in insertion order."""
        return list(self._members)

    def __contains__(self, individual: object) -> bool:
        return individual in self._members

    def __len__(self) -> int:
        return len(self._members)

    def __iter__(self) -> Iterator[Individual]:
        return iter(list(self._members))

    def __repr__(self) -> str:
        return f"BoundedExtremalSet({self.policy.name}, size={len(self)}, border={self.border})"


def required_capacity(fraction: float, population_size: int) -> int:
    """Number of slots for a fraction of the population, rounded up."""
    return int(math.ceil(fraction * population_size))
