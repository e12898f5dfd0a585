"""
CVOA strain: one independent run of the propagation algorithm.

A strain starts from a random patient zero and, every iteration, lets the
infected population spread to neighbouring bit-vectors. Superspreaders infect
more individuals than ordinary carriers, a fraction of each generation dies,
the rest recovers, and after the social distancing onset new infections may
be isolated instead of joining the population. Recovered, dead and isolated
individuals as well as the global best are shared with every other strain
through a PandemicState.

The strain terminates when the infected population becomes empty
(converged) or when the iteration budget runs out (exhausted).
"""

import logging
import random
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from ..exceptions import ConfigurationError
from ..utils.logging import IterationLog, PandemicLogger, StrainLog
from .individual import Individual
from .pandemic import PandemicState
from .selection import (
    DEATH_POLICY,
    SUPERSPREADER_POLICY,
    BoundedExtremalSet,
    required_capacity,
)

logger = logging.getLogger(__name__)

RUNNING = 'running'
CONVERGED = 'converged'
EXHAUSTED = 'exhausted'


@dataclass
class StrainConfig:
    """
    Parameters of a single strain.

    Attributes:
        size: Number of bits of an individual
        max_iterations: Iteration budget (0 returns patient zero untouched)
        strain_id: Identifier used in logs and results
        seed: RNG seed, or offset added to the wall clock
        use_wall_clock_seed: Seed from wall-clock nanoseconds plus ``seed``
        min_spread / max_spread: Infections caused by an ordinary carrier
        min_superspread / max_superspread: Infections caused by a superspreader
        social_distancing: Iteration from which isolation applies
        p_isolation: Probability that a new infection is isolated
        p_travel: Probability that a carrier's infections travel far
        p_reinfection: Probability that a recovered individual is reinfected
        superspreader_perc: Fraction of the population selected as superspreaders
        death_perc: Fraction of the population selected as deaths
    """
    size: int
    max_iterations: int
    strain_id: str = 'Strain #1'
    seed: int = 0
    use_wall_clock_seed: bool = False
    min_spread: int = 0
    max_spread: int = 5
    min_superspread: int = 6
    max_superspread: int = 15
    social_distancing: int = 10
    p_isolation: float = 0.7
    p_travel: float = 0.1
    p_reinfection: float = 0.001
    superspreader_perc: float = 0.1
    death_perc: float = 0.15

    INTEGER_FIELDS = ('size', 'max_iterations', 'seed', 'social_distancing', 'min_spread',
                      'max_spread', 'min_superspread', 'max_superspread')
    PROBABILITY_FIELDS = ('p_isolation', 'p_travel', 'p_reinfection', 'superspreader_perc', 'death_perc')

    def validate(self) -> None:
        """
        Check every parameter.

        Raises:
            ConfigurationError: On the first invalid parameter
        """
        for name in self.INTEGER_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"{name} must be an integer, got {value!r}")
        for name in self.PROBABILITY_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigurationError(f"{name} must be a number, got {value!r}")

        if self.size <= 0:
            raise ConfigurationError(f"size must be positive, got {self.size}")
        if self.max_iterations < 0:
            raise ConfigurationError(f"max_iterations must be non-negative, got {self.max_iterations}")
        if self.social_distancing < 0:
            raise ConfigurationError(f"social_distancing must be non-negative, got {self.social_distancing}")

        for name in self.PROBABILITY_FIELDS:
            value = getattr(self, name)
            if not (0.0 <= value <= 1.0):
                raise ConfigurationError(f"{name} must be within [0, 1], got {value}")

        if self.min_spread < 0 or self.max_spread < self.min_spread:
            raise ConfigurationError(
                f"Invalid spread range [{self.min_spread}, {self.max_spread}]"
            )
        if self.min_superspread < 0 or self.max_superspread < self.min_superspread:
            raise ConfigurationError(
                f"Invalid superspread range [{self.min_superspread}, {self.max_superspread}]"
            )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class StrainResult:
    """
    Terminal outcome of a strain.

    Attributes:
        strain_id: Identifier of the strain
        best: Local best individual at termination
        status: CONVERGED or EXHAUSTED
        iterations: Number of propagation steps executed
        discovering_iteration: Completed steps when an optimal individual
                               was first held (None if never)
        history: Per-iteration statistics
    """
    strain_id: str
    best: Individual
    status: str
    iterations: int
    discovering_iteration: Optional[int] = None
    history: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'strain_id': self.strain_id,
            'status': self.status,
            'iterations': self.iterations,
            'discovering_iteration': self.discovering_iteration,
            'best': self.best.to_dict(),
        }


class Strain:
    """
    One CVOA search process.

    Attributes:
        config: StrainConfig of this strain
        pandemic: Shared PandemicState
        rng: Strain-private random number generator
        infected: Current generation (duplicate-free, insertion ordered)
        best: Local best individual
        time: Current iteration counter
        status: RUNNING, CONVERGED or EXHAUSTED
    """

    def __init__(
        self,
        config: StrainConfig,
        pandemic: PandemicState,
        rng: Optional[random.Random] = None,
        event_logger: Optional[PandemicLogger] = None
    ):
        """
        Initialize a strain.

        Args:
            config: Strain parameters (validated here)
            pandemic: Shared state, already initialized for this run
            rng: Explicit RNG; built from the configured seed if None
            event_logger: Optional structured logger for per-iteration records

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        config.validate()
        self.config = config
        self.pandemic = pandemic
        self.event_logger = event_logger

        if rng is None:
            seed = config.seed
            if config.use_wall_clock_seed:
                seed = time.time_ns() + config.seed
            rng = random.Random(seed)
        self.rng = rng

        self.infected: List[Individual] = []
        self.superspreaders = BoundedExtremalSet(SUPERSPREADER_POLICY)
        self.deaths = BoundedExtremalSet(DEATH_POLICY)
        self.best: Optional[Individual] = None
        self.time = 0
        self.status = RUNNING
        self.discovering_iteration: Optional[int] = None
        self.history: List[Dict[str, Any]] = []
        self._stopping_iteration = -1

    @property
    def strain_id(self) -> str:
        return self.config.strain_id

    @property
    def size(self) -> int:
        return self.config.size

    @property
    def last_iteration(self) -> int:
        """Iteration counter at termination, -1 while the strain has not finished."""
        return self._stopping_iteration

    def __call__(self) -> StrainResult:
        return self.run()

    def run(self) -> StrainResult:
        """
        Run the strain to completion.

        Returns:
            StrainResult holding the local best individual

        Raises:
            EvaluationError: If the fitness function fails
        """
        self.start()

        while self.status == RUNNING:
            self.propagate_disease()

            self.time += 1
            if not self.infected:
                self.status = CONVERGED
            elif self.time >= self.config.max_iterations:
                self.status = EXHAUSTED

        return self.finish()

    def start(self) -> Individual:
        """Infect patient zero and set up the initial strain state."""
        pz = self.infect_patient_zero()

        self.infected = [pz]
        self.best = pz
        self.superspreaders.reset()
        self.superspreaders.seed(pz)
        self.deaths.reset()
        self.pandemic.offer_best(pz)
        self.time = 0
        self.status = RUNNING if self.config.max_iterations > 0 else EXHAUSTED
        self.discovering_iteration = None
        self.history = []
        self._record_discovery(0)

        logger.info(f"Patient Zero ({self.strain_id}): {pz}")
        return pz

    def finish(self) -> StrainResult:
        self._stopping_iteration = self.time
        result = StrainResult(
            strain_id=self.strain_id,
            best=self.best,
            status=self.status,
            iterations=self.time,
            discovering_iteration=self.discovering_iteration,
            history=list(self.history),
        )

        logger.info(f"{self.strain_id} {self.status} after {self.time} iterations. Best individual = {self.best}")
        if self.event_logger is not None:
            self.event_logger.log_strain_finished(StrainLog(
                strain_id=self.strain_id,
                status=self.status,
                iterations=self.time,
                best_fitness=self.best.fitness,
                best_bits=self.best.bits,
                discovering_iteration=self.discovering_iteration,
            ))
        return result

    def propagate_disease(self) -> List[Individual]:
        """
        Execute one propagation step and replace the infected population.

        Returns:
            The new infected population
        """
        infected = self.infected
        n = len(infected)
        pandemic = self.pandemic

        if n == 1:
            # A lone carrier is its own superspreader and nobody dies
            self.superspreaders.reset()
            self.superspreaders.seed(infected[0])
            self.deaths.reset()
        else:
            self._select_superspreaders_and_deaths(infected)
            pandemic.dead.update(self.deaths)

        pandemic.recovered.difference_update(pandemic.dead)

        new_infected: Dict[Individual, None] = {}
        for x in infected:
            if x in self.superspreaders:
                n_infected = self.rng.randint(self.config.min_superspread, self.config.max_superspread)
            else:
                n_infected = self.rng.randint(self.config.min_spread, self.config.max_spread)

            travel_distance = 1
            if self.rng.random() < self.config.p_travel:
                travel_distance = self.rng.randint(0, self.size)

            for _ in range(n_infected):
                z = self.infect(x, travel_distance)
                self._update_best(z)
                if self._admit(z):
                    new_infected[z] = None

        self.infected = list(new_infected)
        self._record_iteration(n, len(self.infected))
        self._record_discovery(self.time + 1)
        return self.infected

    def _select_superspreaders_and_deaths(self, infected: Sequence[Individual]) -> None:
        n = len(infected)
        remaining_superspreaders = required_capacity(self.config.superspreader_perc, n)
        remaining_deaths = required_capacity(self.config.death_perc, n)

        self.superspreaders.reset()
        self.deaths.reset()
        dead = self.pandemic.dead
        recovered = self.pandemic.recovered
        # A zero fraction selects nobody, not even the first arrival
        select_superspreaders = remaining_superspreaders > 0
        select_deaths = remaining_deaths > 0

        for individual in infected:
            if select_superspreaders and self.superspreaders.try_insert(individual, remaining_superspreaders):
                remaining_superspreaders -= 1

            if select_deaths and self.deaths.try_insert(individual, remaining_deaths):
                remaining_deaths -= 1
            elif individual not in dead:
                recovered.add(individual)

            self._update_best(individual)

    def _admit(self, z: Individual) -> bool:
        """Decide whether a new infection joins the next generation."""
        pandemic = self.pandemic

        if self.time >= self.config.social_distancing and self.rng.random() < self.config.p_isolation:
            if z not in pandemic.dead and z not in pandemic.recovered:
                pandemic.isolated.add(z)
            return False

        if z in pandemic.dead:
            return False
        if z in pandemic.recovered:
            if self.rng.random() < self.config.p_reinfection:
                pandemic.recovered.discard(z)
                return True
            return False
        return True

    def _update_best(self, individual: Individual) -> None:
        self.pandemic.offer_best(individual)
        if individual.is_better_than(self.best):
            self.best = individual

    def _record_discovery(self, completed_steps: int) -> None:
        if self.discovering_iteration is None and self.best.fitness == self.pandemic.target_fitness:
            self.discovering_iteration = completed_steps
            logger.info(f"{self.strain_id} found an optimal individual at iteration {completed_steps}")

    def _record_iteration(self, infected: int, new_infected: int) -> None:
        r0 = new_infected / infected if infected else 0.0
        global_best = self.pandemic.best
        stats = {
            'strain_id': self.strain_id,
            'iteration': self.time,
            'global_best_fitness': global_best.fitness,
            'strain_best_fitness': self.best.fitness,
            'infected': infected,
            'new_infected': new_infected,
            'r0': r0,
        }
        self.history.append(stats)

        # Single record per iteration
        logger.debug(
            f"[{self.strain_id}] - Iteration #{self.time} | Best global fitness = {global_best.fitness:.4g} | "
            f"Best strain fitness = {self.best.fitness:.4g} | #NewInfected = {new_infected} | R0 = {r0:.2f}"
        )
        if self.event_logger is not None:
            self.event_logger.log_iteration(IterationLog(
                recovered=len(self.pandemic.recovered),
                dead=len(self.pandemic.dead),
                isolated=len(self.pandemic.isolated),
                **stats,
            ))

    def infect_patient_zero(self) -> Individual:
        """Build patient zero from independent fair coin flips."""
        data = [self.rng.randrange(2) for _ in range(self.size)]
        return self.pandemic.evaluate(data)

    def infect(self, individual: Individual, travel_distance: int) -> Individual:
        """
        Infect a new individual by flipping distinct bits.

        Args:
            individual: Carrier of the infection
            travel_distance: Number of distinct bit positions to flip

        Returns:
            New, evaluated Individual
        """
        data = list(individual.data)
        for pos in self.rng.sample(range(self.size), travel_distance):
            data[pos] = 1 - data[pos]
        return self.pandemic.evaluate(data)
