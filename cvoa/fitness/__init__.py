"""
Fitness module for CVOA.

Provides the fitness function interface and reference minimization problems
over bit-vectors.
"""

from .functions import (
    FitnessFunction,
    OneMaxFitness,
    HammingTargetFitness,
    PolynomialFitness,
    get_fitness_function,
    list_fitness_functions
)

__all__ = [
    'FitnessFunction',
    'OneMaxFitness',
    'HammingTargetFitness',
    'PolynomialFitness',
    'get_fitness_function',
    'list_fitness_functions'
]
