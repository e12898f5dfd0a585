"""
Epidemic Module for CVOA.

This module implements the core propagation algorithm: individuals and their
ordering, bounded superspreader/death selection, the state shared between
concurrent strains, the strain loop itself and the runner executing strains
in parallel.
"""

from .individual import Individual, build_individual, WORSE, EQUAL, BETTER
from .selection import BoundedExtremalSet, SelectionPolicy, SUPERSPREADER_POLICY, DEATH_POLICY, required_capacity
from .pandemic import ConcurrentSet, PandemicState, initialize_pandemic
from .strain import Strain, StrainConfig, StrainResult, RUNNING, CONVERGED, EXHAUSTED
from .runner import PandemicRunner, RunSummary, create_strain_configs, create_runner_from_config

__all__ = [
    # Individual
    'Individual',
    'build_individual',
    'WORSE',
    'EQUAL',
    'BETTER',

    # Selection
    'BoundedExtremalSet',
    'SelectionPolicy',
    'SUPERSPREADER_POLICY',
    'DEATH_POLICY',
    'required_capacity',

    # Pandemic
    'ConcurrentSet',
    'PandemicState',
    'initialize_pandemic',

    # Strain
    'Strain',
    'StrainConfig',
    'StrainResult',
    'RUNNING',
    'CONVERGED',
    'EXHAUSTED',

    # Runner
    'PandemicRunner',
    'RunSummary',
    'create_strain_configs',
    'create_runner_from_config',
]
