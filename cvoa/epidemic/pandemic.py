"""
Shared pandemic state for concurrently running strains.

One PandemicState exists per optimization run. It holds the global best
individual, the fitness function, and three internally synchronized sets:
recovered, dead and isolated. Each operation on one collection is atomic;
there are no transactions spanning several collections, so a strain may see
a slightly stale view of one set relative to another.
"""

import logging
import threading
from typing import Any, Callable, Dict, Iterable, Iterator, Optional, Set, Tuple

from .individual import Individual, build_individual

logger = logging.getLogger(__name__)


class ConcurrentSet:
    """Set of individuals guarded by a re-entrant lock."""

    def __init__(self, name: str):
        self.name = name
        self._items: Set[Individual] = set()
        self._lock = threading.RLock()

    def add(self, individual: Individual) -> None:
        with self._lock:
            self._items.add(individual)

    def discard(self, individual: Individual) -> bool:
        """Remove an individual if present; return whether it was removed."""
        with self._lock:
            if individual in self._items:
                self._items.remove(individual)
                return True
            return False

    def update(self, individuals: Iterable[Individual]) -> None:
        items = list(individuals)
        with self._lock:
            self._items.update(items)

    def difference_update(self, other: 'ConcurrentSet') -> int:
        """
        Remove every individual present in another set.

        The other set is snapshotted first so the two locks are never held
        together.

        Returns:
            Number of removed individuals
        """
        removed = other.snapshot()
        with self._lock:
            before = len(self._items)
            self._items.difference_update(removed)
            return before - len(self._items)

    def snapshot(self) -> Set[Individual]:
        with self._lock:
            return set(self._items)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __contains__(self, individual: object) -> bool:
        with self._lock:
            return individual in self._items

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __iter__(self) -> Iterator[Individual]:
        return iter(self.snapshot())

    def __repr__(self) -> str:
        return f"ConcurrentSet({self.name}, size={len(self)})"


class PandemicState:
    """
    Process-wide state shared by every strain of one run.

    Attributes:
        recovered: Individuals that survived an iteration (may be reinfected)
        dead: Individuals selected as deaths (permanent within the run)
        isolated: Individuals kept out of the population by social distancing
        fitness_function: Callable evaluating a bit-vector
    """

    def __init__(
        self,
        initial_best: Individual,
        fitness_function: Callable[[Tuple[int, ...]], float]
    ):
        self._lock = threading.RLock()
        self.initialize(initial_best, fitness_function)

    def initialize(
        self,
        initial_best: Individual,
        fitness_function: Callable[[Tuple[int, ...]], float]
    ) -> None:
        """Reset the shared state for a new run."""
        with self._lock:
            self._best = initial_best
            self.fitness_function = fitness_function
            self.recovered = ConcurrentSet('recovered')
            self.dead = ConcurrentSet('dead')
            self.isolated = ConcurrentSet('isolated')
        logger.info(f"Pandemic initialized with best={initial_best}")

    @property
    def best(self) -> Individual:
        with self._lock:
            return self._best

    @property
    def target_fitness(self) -> float:
        return float(getattr(self.fitness_function, 'target', 0.0))

    def offer_best(self, candidate: Individual) -> bool:
        """
        Compare-and-set the global best.

        Returns:
            True if the candidate strictly improved on the current best
        """
        with self._lock:
            if candidate.is_better_than(self._best):
                self._best = candidate
                return True
            return False

    def evaluate(self, data) -> Individual:
        """Build an individual from a bit-vector using the shared fitness function."""
        return build_individual(data, self.fitness_function)

    def get_statistics(self) -> Dict[str, Any]:
        best = self.best
        return {
            'best_fitness': best.fitness,
            'best_bits': best.bits,
            'recovered': len(self.recovered),
            'dead': len(self.dead),
            'isolated': len(self.isolated),
        }


def initialize_pandemic(
    initial_best: Optional[Individual],
    fitness_function: Callable[[Tuple[int, ...]], float]
) -> PandemicState:
    """
    Create the shared state for a new run.

    Args:
        initial_best: Starting global best; the worst-possible sentinel if None
        fitness_function: Fitness function shared by all strains

    Returns:
        Fresh PandemicState
    """
    if initial_best is None:
        initial_best = Individual.extreme(worst=True)
    return PandemicState(initial_best, fitness_function)
