"""
Test suite for running several strains over one shared pandemic.

Tests cover:
- Two strains cooperating through the shared best on a tiny search space
- Building strain configurations and runners from configuration dictionaries
- RunSummary serialization and history frames
- Failure propagation from a strain to the caller
"""

import copy
import logging
import random

import pandas as pd
import pytest

from cvoa.epidemic.individual import Individual
from cvoa.epidemic.runner import (
    PandemicRunner,
    RunSummary,
    create_runner_from_config,
    create_strain_configs,
)
from cvoa.epidemic.strain import CONVERGED, StrainConfig
from cvoa.exceptions import ConfigurationError, EvaluationError
from cvoa.fitness.functions import HammingTargetFitness, OneMaxFitness
from cvoa.utils.config import DEFAULT_CONFIG
from cvoa.utils.logging import PandemicLogger


SPREAD = 50


def observes_optimum(seed: int, size: int = 4) -> bool:
    """
    Replay the first step of a fully isolating strain and report whether the
    all-zero vector is among patient zero and its children.
    """
    rng = random.Random(seed)
    pz = [rng.randrange(2) for _ in range(size)]
    if not any(pz):
        return True
    rng.randint(SPREAD, SPREAD)
    rng.random()
    for _ in range(SPREAD):
        child = list(pz)
        for pos in rng.sample(range(size), 1):
            child[pos] = 1 - child[pos]
        if not any(child):
            return True
        rng.random()
    return False


def make_config(**overrides):
    config = copy.deepcopy(DEFAULT_CONFIG)
    config['problem']['size'] = 8
    config['pandemic'].update(num_strains=2, max_iterations=3)
    for section, values in overrides.items():
        config[section].update(values)
    return config


class TestTwoStrainScenario:
    """Two strains sharing one pandemic on a 4-bit OneMax problem."""

    def test_both_strains_reach_optimum(self):
        seeds = [seed for seed in range(500) if observes_optimum(seed)][:2]
        assert len(seeds) == 2

        # Every child is isolated, so each strain's RNG stream is independent
        # of what the other strain writes into the shared sets
        configs = [
            StrainConfig(
                size=4, max_iterations=5, strain_id=f"Strain #{i + 1}", seed=seed,
                min_superspread=SPREAD, max_superspread=SPREAD, p_travel=0.0,
                social_distancing=0, p_isolation=1.0,
            )
            for i, seed in enumerate(seeds)
        ]
        runner = PandemicRunner(OneMaxFitness(), configs, max_workers=2)

        summary = runner.run()

        assert [r.strain_id for r in summary.results] == ['Strain #1', 'Strain #2']
        for result in summary.results:
            assert result.best.fitness == 0.0
            assert result.best.bits == '0000'
            assert result.status == CONVERGED
        assert summary.best.fitness == 0.0
        assert summary.converged_strains == 2

    def test_shared_best_dominates_every_strain(self):
        configs = create_strain_configs(make_config(pandemic={'num_strains': 4, 'max_iterations': 6}))
        runner = PandemicRunner(OneMaxFitness(), configs)

        summary = runner.run()

        assert len(summary.results) == 4
        assert summary.best.fitness == min(r.best.fitness for r in summary.results)
        assert not (runner.pandemic.recovered.snapshot() & runner.pandemic.dead.snapshot())

    def test_rerun_starts_from_fresh_pandemic(self):
        configs = create_strain_configs(make_config())
        runner = PandemicRunner(OneMaxFitness(), configs)

        runner.run()
        first = runner.pandemic
        runner.run()

        assert runner.pandemic is not first


class TestPandemicRunner:
    """Test runner construction and failure handling."""

    def test_requires_strains(self):
        with pytest.raises(ConfigurationError):
            PandemicRunner(OneMaxFitness(), [])

    def test_validates_configs(self):
        with pytest.raises(ConfigurationError):
            PandemicRunner(OneMaxFitness(), [StrainConfig(size=4, max_iterations=-2)])

    def test_default_workers(self):
        configs = create_strain_configs(make_config(pandemic={'num_strains': 3}))
        assert PandemicRunner(OneMaxFitness(), configs).max_workers == 3

    def test_strain_failure_is_raised(self):
        def fitness(bits):
            raise RuntimeError("evaluator unavailable")

        runner = PandemicRunner(fitness, create_strain_configs(make_config()))

        with pytest.raises(EvaluationError):
            runner.run()

    def test_strain_failure_is_logged(self, tmp_path, caplog):
        def fitness(bits):
            raise RuntimeError("evaluator unavailable")

        event_logger = PandemicLogger(log_dir=str(tmp_path / 'logs'))
        runner = PandemicRunner(fitness, create_strain_configs(make_config()), event_logger=event_logger)

        with caplog.at_level(logging.ERROR, logger='CVOA'):
            with pytest.raises(EvaluationError):
                runner.run()

        records = [r for r in caplog.records if r.name == 'CVOA' and r.levelno >= logging.ERROR]
        assert len(records) == 1
        assert 'Error in Strain #1' in records[0].getMessage()
        assert records[0].exc_info[0] is EvaluationError

    def test_event_logger_receives_every_iteration(self, tmp_path):
        event_logger = PandemicLogger(log_dir=str(tmp_path / 'logs'))
        configs = create_strain_configs(make_config())

        summary = PandemicRunner(OneMaxFitness(), configs, event_logger=event_logger).run()

        records = event_logger.read_iterations()
        assert len(records) == sum(r.iterations for r in summary.results)
        assert event_logger.get_run_summary()['finished_strains'] == 2


class TestRunSummary:
    """Test summary serialization."""

    def test_history_frame(self):
        configs = create_strain_configs(make_config())
        summary = PandemicRunner(OneMaxFitness(), configs).run()

        history = summary.history_frame()

        assert isinstance(history, pd.DataFrame)
        assert list(history.columns) == [
            'strain_id', 'iteration', 'global_best_fitness', 'strain_best_fitness',
            'infected', 'new_infected', 'r0',
        ]
        assert len(history) == sum(r.iterations for r in summary.results)
        assert set(history['strain_id']) == {'Strain #1', 'Strain #2'}

    def test_empty_history_frame(self):
        summary = RunSummary(results=[], best=Individual.extreme(worst=True))
        assert summary.history_frame().empty

    def test_to_dict(self):
        configs = create_strain_configs(make_config())
        summary = PandemicRunner(OneMaxFitness(), configs).run()

        payload = summary.to_dict()

        assert payload['best'] == summary.best.to_dict()
        assert len(payload['strains']) == 2
        assert payload['statistics']['best_fitness'] == summary.best.fitness
        assert payload['converged_strains'] == summary.converged_strains


class TestCreateFromConfig:
    """Test configuration-driven construction."""

    def test_strain_seeds_and_ids(self):
        configs = create_strain_configs(make_config(pandemic={'num_strains': 3, 'seed': 10}))

        assert [c.seed for c in configs] == [10, 11, 12]
        assert [c.strain_id for c in configs] == ['Strain #1', 'Strain #2', 'Strain #3']
        assert all(c.size == 8 and c.max_iterations == 3 for c in configs)

    def test_strain_parameters_applied(self):
        configs = create_strain_configs(make_config(strain={'p_travel': 0.5, 'max_spread': 3}))

        assert all(c.p_travel == 0.5 and c.max_spread == 3 for c in configs)

    def test_unknown_strain_parameter(self):
        with pytest.raises(ConfigurationError, match="Unknown strain parameters"):
            create_strain_configs(make_config(strain={'mutation_rate': 0.2}))

    def test_structural_fields_not_accepted_as_strain_parameters(self):
        with pytest.raises(ConfigurationError):
            create_strain_configs(make_config(strain={'seed': 3}))

    def test_non_positive_strain_count(self):
        with pytest.raises(ConfigurationError):
            create_strain_configs(make_config(pandemic={'num_strains': 0}))

    def test_runner_from_config(self):
        config = make_config(problem={'fitness': {'name': 'hamming', 'params': {'target_bits': '10101010'}}})

        runner = create_runner_from_config(config)

        assert isinstance(runner.fitness_function, HammingTargetFitness)
        assert len(runner.strain_configs) == 2

    def test_invalid_fitness_config(self):
        config = make_config(problem={'fitness': {'name': 'rastrigin', 'params': {}}})

        with pytest.raises(ConfigurationError):
            create_runner_from_config(config)

    def test_invalid_fitness_params(self):
        config = make_config(problem={'fitness': {'name': 'onemax', 'params': {'bogus': 1}}})

        with pytest.raises(ConfigurationError):
            create_runner_from_config(config)
