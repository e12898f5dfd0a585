"""
Individual representation for CVOA.

An individual is a fixed-length bit-vector together with its fitness value.
Individuals are immutable: infecting one always builds a new instance.

Ordering follows a minimization convention:
- ``WORSE`` (1): this individual has a higher fitness than the other
- ``EQUAL`` (0): both fitness values are equal
- ``BETTER`` (-1): this individual has a lower fitness than the other

Equality and hashing only look at the bit-vector, so sets of individuals
behave as sets of visited points of the search space.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, Sequence, Tuple

from ..exceptions import EvaluationError

logger = logging.getLogger(__name__)

WORSE = 1
EQUAL = 0
BETTER = -1


@dataclass(frozen=True, eq=False)
class Individual:
    """A candidate solution: bit-vector plus fitness."""
    data: Tuple[int, ...]
    fitness: float

    def compare_to(self, other: 'Individual') -> int:
        """Three-way comparison against another individual (see module docstring)."""
        if self.fitness > other.fitness:
            return WORSE
        if self.fitness < other.fitness:
            return BETTER
        return EQUAL

    def is_better_than(self, other: 'Individual') -> bool:
        return self.compare_to(other) == BETTER

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def bits(self) -> str:
        """Bit-vector rendered as a string, e.g. ``'0110'``."""
        return ''.join(str(b) for b in self.data)

    @classmethod
    def extreme(cls, worst: bool) -> 'Individual':
        """
        Sentinel individual used as an initial border value.

        Args:
            worst: If True, return the worst possible individual (fitness +inf),
                   otherwise the best possible one (fitness -inf)

        Returns:
            Individual with an empty bit-vector
        """
        return cls(data=(), fitness=math.inf if worst else -math.inf)

    def to_dict(self) -> Dict[str, Any]:
        """Convert individual to dictionary for serialization."""
        return {
            'bits': self.bits,
            'fitness': self.fitness,
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Individual):
            return NotImplemented
        return self.data == other.data

    def __hash__(self) -> int:
        return hash(self.data)

    def __str__(self) -> str:
        return f"[{self.bits}] fitness={self.fitness:.4g}"


def build_individual(
    data: Sequence[int],
    fitness_function: Callable[[Tuple[int, ...]], float]
) -> Individual:
    """
    Evaluate a bit-vector and wrap it into an Individual.

    Args:
        data: Bit-vector as a sequence of 0/1 values
        fitness_function: Callable mapping the bit-vector to a float

    Returns:
        New Individual

    Raises:
        EvaluationError: If the fitness function raises or returns a
                         non-finite value
    """
    bits = tuple(int(b) for b in data)
    try:
        fitness = float(fitness_function(bits))
    except Exception as e:
        raise EvaluationError(f"Fitness evaluation failed for {bits}: {e}", data=bits) from e

    if not math.isfinite(fitness):
        raise EvaluationError(f"Non-finite fitness {fitness} for {bits}", data=bits)

    return Individual(data=bits, fitness=fitness)
