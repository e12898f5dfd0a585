"""
CVOA: Coronavirus Optimization Algorithm

This package implements a population-based metaheuristic for binary search
spaces modeled on epidemic spread. Several strains search concurrently and
share the global best individual as well as the recovered, dead and isolated
populations.

Main Components:
- epidemic: Individuals, bounded selection, shared pandemic state, strains, runner
- fitness: Reference fitness functions
- utils: Configuration, logging, visualization utilities

Usage:
    from cvoa.epidemic import PandemicRunner, StrainConfig
    from cvoa.fitness import OneMaxFitness
"""

__version__ = "1.0.0"

__all__ = [
    "epidemic",
    "fitness",
    "utils",
]
