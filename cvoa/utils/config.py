"""
Configuration loading for CVOA.

Configuration is plain YAML merged over DEFAULT_CONFIG. Sections:
- problem: search-space size and fitness function
- pandemic: number of strains, iteration budget, seeding, thread pool size
- strain: epidemic parameters shared by every strain
- logging: level and directory
- output: results directory and visualization flag
"""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    'problem': {
        'size': 20,
        'fitness': {
            'name': 'onemax',
            'params': {},
        },
    },
    'pandemic': {
        'num_strains': 4,
        'max_iterations': 20,
        'seed': 0,
        'use_wall_clock_seed': False,
        'max_workers': None,
    },
    'strain': {
        'min_spread': 0,
        'max_spread': 5,
        'min_superspread': 6,
        'max_superspread': 15,
        'social_distancing': 10,
        'p_isolation': 0.7,
        'p_travel': 0.1,
        'p_reinfection': 0.001,
        'superspreader_perc': 0.1,
        'death_perc': 0.15,
    },
    'logging': {
        'level': 'INFO',
        'directory': 'results/logs',
    },
    'output': {
        'results_dir': 'results',
        'visualization': True,
    },
}


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merge two dictionaries, with override taking precedence.

    Args:
        base: Base dictionary
        override: Dictionary with override values

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_config(config_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Load configuration from a YAML file merged over the defaults.

    Args:
        config_path: Path to a YAML file, or the name of a file in the
                     repository ``config/`` directory (without extension).
                     None returns the defaults.

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If the configuration file cannot be found
        ConfigurationError: If the file does not contain a mapping
    """
    config = copy.deepcopy(DEFAULT_CONFIG)
    if config_path is None:
        return config

    config_file = Path(config_path)

    if not config_file.exists():
        possible_paths = [
            Path(__file__).parent.parent.parent / "config" / f"{config_path}.yaml",
            Path("config") / f"{config_path}.yaml",
        ]

        for path in possible_paths:
            if path.exists():
                config_file = path
                break
        else:
            raise FileNotFoundError(
                f"Configuration file not found: {config_path}. "
                f"Tried: {[str(p) for p in possible_paths]}"
            )

    logger.info(f"Loading configuration from: {config_file}")

    with open(config_file, 'r') as f:
        loaded = yaml.safe_load(f) or {}

    if not isinstance(loaded, dict):
        raise ConfigurationError(f"Configuration file {config_file} must contain a mapping")

    return _deep_merge(config, loaded)
