"""
Pandemic runner for CVOA.

Builds N strains over one shared PandemicState and runs them in parallel on a
thread pool. Strains never wait for each other; the only cooperation happens
through the shared best individual and the recovered/dead/isolated sets.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional, Tuple

import pandas as pd

from ..exceptions import ConfigurationError
from ..fitness.functions import get_fitness_function
from ..utils.logging import PandemicLogger
from .individual import Individual
from .pandemic import PandemicState, initialize_pandemic
from .strain import CONVERGED, Strain, StrainConfig, StrainResult

logger = logging.getLogger(__name__)


@dataclass
class RunSummary:
    """
    Outcome of a whole run.

    Attributes:
        results: One StrainResult per strain, in strain order
        best: Global best individual of the shared state
        statistics: Final sizes of the shared sets
        elapsed_seconds: Wall-clock duration of the run
    """
    results: List[StrainResult]
    best: Individual
    statistics: Dict[str, Any] = field(default_factory=dict)
    elapsed_seconds: float = 0.0

    @property
    def converged_strains(self) -> int:
        return sum(1 for r in self.results if r.status == CONVERGED)

    def history_frame(self) -> pd.DataFrame:
        """Per-iteration statistics of every strain as one DataFrame."""
        rows = [row for result in self.results for row in result.history]
        columns = ['strain_id', 'iteration', 'global_best_fitness', 'strain_best_fitness',
                   'infected', 'new_infected', 'r0']
        return pd.DataFrame(rows, columns=columns)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'best': self.best.to_dict(),
            'elapsed_seconds': self.elapsed_seconds,
            'converged_strains': self.converged_strains,
            'statistics': self.statistics,
            'strains': [r.to_dict() for r in self.results],
        }


class PandemicRunner:
    """
    Runs several strains concurrently over one shared PandemicState.

    Attributes:
        fitness_function: Fitness function shared by every strain
        strain_configs: One StrainConfig per strain
        max_workers: Thread pool size (defaults to the number of strains)
        pandemic: Shared state of the latest run
    """

    def __init__(
        self,
        fitness_function: Callable[[Tuple[int, ...]], float],
        strain_configs: List[StrainConfig],
        max_workers: Optional[int] = None,
        initial_best: Optional[Individual] = None,
        event_logger: Optional[PandemicLogger] = None
    ):
        """
        Initialize the runner.

        Args:
            fitness_function: Fitness function shared by every strain
            strain_configs: One configuration per strain
            max_workers: Thread pool size
            initial_best: Starting global best (worst-possible sentinel if None)
            event_logger: Optional structured logger passed to every strain

        Raises:
            ConfigurationError: If no strain is configured or a configuration is invalid
        """
        if not strain_configs:
            raise ConfigurationError("At least one strain is required")
        for strain_config in strain_configs:
            strain_config.validate()

        self.fitness_function = fitness_function
        self.strain_configs = list(strain_configs)
        self.max_workers = max_workers or len(self.strain_configs)
        self.initial_best = initial_best
        self.event_logger = event_logger
        self.pandemic: Optional[PandemicState] = None

        logger.info(f"Initialized PandemicRunner with {len(self.strain_configs)} strains, "
                    f"max_workers={self.max_workers}")

    def run(self) -> RunSummary:
        """
        Initialize the pandemic and run every strain to completion.

        Returns:
            RunSummary with one result per strain

        Raises:
            EvaluationError: The first strain failure, after all strains finished
        """
        start = time.time()
        self.pandemic = initialize_pandemic(self.initial_best, self.fitness_function)
        strains = [
            Strain(strain_config, self.pandemic, event_logger=self.event_logger)
            for strain_config in self.strain_configs
        ]

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix='strain') as executor:
            futures = [executor.submit(strain) for strain in strains]

        results = []
        for strain, future in zip(strains, futures):
            error = future.exception()
            if error is not None:
                logger.error(f"{strain.strain_id} failed: {error}")
                if self.event_logger is not None:
                    self.event_logger.log_error(error, context=strain.strain_id)
                raise error
            results.append(future.result())

        summary = RunSummary(
            results=results,
            best=self.pandemic.best,
            statistics=self.pandemic.get_statistics(),
            elapsed_seconds=time.time() - start,
        )
        logger.info(f"Run finished in {summary.elapsed_seconds:.2f}s | "
                    f"{summary.converged_strains}/{len(results)} strains converged | Best = {summary.best}")
        return summary


def create_strain_configs(config: Dict[str, Any]) -> List[StrainConfig]:
    """
    Build one StrainConfig per strain from a configuration dictionary.

    Strain ``i`` gets ``seed + i`` so every strain draws a distinct stream.

    Args:
        config: Configuration dictionary with 'problem', 'pandemic' and 'strain' sections

    Returns:
        List of StrainConfig
    """
    problem_config = config.get('problem', {})
    pandemic_config = config.get('pandemic', {})
    strain_params = dict(config.get('strain', {}) or {})

    num_strains = int(pandemic_config.get('num_strains', 1))
    if num_strains <= 0:
        raise ConfigurationError(f"num_strains must be positive, got {num_strains}")

    known = set(StrainConfig.__dataclass_fields__) - {
        'size', 'max_iterations', 'strain_id', 'seed', 'use_wall_clock_seed'
    }
    unknown = set(strain_params) - known
    if unknown:
        raise ConfigurationError(f"Unknown strain parameters: {sorted(unknown)}")

    base = StrainConfig(
        size=int(problem_config.get('size', 20)),
        max_iterations=int(pandemic_config.get('max_iterations', 20)),
        use_wall_clock_seed=bool(pandemic_config.get('use_wall_clock_seed', False)),
        **strain_params,
    )
    seed = int(pandemic_config.get('seed', 0))

    return [
        replace(base, strain_id=f"Strain #{i + 1}", seed=seed + i)
        for i in range(num_strains)
    ]


def create_runner_from_config(
    config: Dict[str, Any],
    event_logger: Optional[PandemicLogger] = None
) -> PandemicRunner:
    """
    Create a PandemicRunner from a configuration dictionary.

    Args:
        config: Configuration dictionary (see cvoa.utils.config)
        event_logger: Optional structured logger

    Returns:
        Configured PandemicRunner
    """
    fitness_config = config.get('problem', {}).get('fitness', {}) or {}
    try:
        fitness_function = get_fitness_function(
            fitness_config.get('name', 'onemax'),
            fitness_config.get('params') or {},
        )
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid fitness configuration: {e}") from e

    return PandemicRunner(
        fitness_function=fitness_function,
        strain_configs=create_strain_configs(config),
        max_workers=config.get('pandemic', {}).get('max_workers'),
        event_logger=event_logger,
    )
