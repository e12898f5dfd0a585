"""
Utilities module for CVOA.

This module provides configuration loading, logging, and visualization
helpers used by the runner and the command-line entry point.
"""

from .config import DEFAULT_CONFIG, load_config
from .logging import setup_logging, PandemicLogger, IterationLog, StrainLog, get_logger
from .visualization import (
    plot_convergence,
    plot_r0,
    plot_population_sizes
)

__all__ = [
    # Configuration
    'DEFAULT_CONFIG',
    'load_config',

    # Logging
    'setup_logging',
    'PandemicLogger',
    'IterationLog',
    'StrainLog',
    'get_logger',

    # Visualization
    'plot_convergence',
    'plot_r0',
    'plot_population_sizes',
]
