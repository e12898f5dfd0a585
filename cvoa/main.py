#!/usr/bin/env python3
"""
CVOA: Coronavirus Optimization Algorithm

Main entry point for running several strains over a shared pandemic.

Usage:
    cvoa --config default --strains 4 --iterations 30
    cvoa --config-path my_problem.yaml --size 32 --seed 7
    python -m cvoa.main --size 16 --no-visualization
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict

from .epidemic.runner import RunSummary, create_runner_from_config
from .utils.config import load_config
from .utils.logging import PandemicLogger, setup_logging
from .utils.visualization import plot_convergence, plot_population_sizes, plot_r0

logger = logging.getLogger(__name__)


def parse_arguments(argv=None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description="CVOA: Coronavirus Optimization Algorithm for binary search spaces",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run with built-in defaults
  cvoa

  # Four strains, 30 iterations, 32-bit individuals
  cvoa --strains 4 --iterations 30 --size 32

  # Custom configuration file
  cvoa --config-path experiments/polynomial.yaml
        """
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Configuration name in the config/ directory (without .yaml extension)"
    )

    parser.add_argument(
        "--config-path",
        type=str,
        default=None,
        help="Full path to configuration file (overrides --config)"
    )

    parser.add_argument(
        "--strains", "-s",
        type=int,
        default=None,
        help="Number of concurrent strains (overrides config file setting)"
    )

    parser.add_argument(
        "--iterations", "-i",
        type=int,
        default=None,
        help="Iteration budget per strain (overrides config file setting)"
    )

    parser.add_argument(
        "--size",
        type=int,
        default=None,
        help="Number of bits per individual (overrides config file setting)"
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Base RNG seed; strain i uses seed + i (disables wall-clock seeding)"
    )

    parser.add_argument(
        "--output-dir", "-o",
        type=str,
        default=None,
        help="Output directory for results (default: from config, 'results')"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: from config, INFO)"
    )

    parser.add_argument(
        "--no-visualization",
        action="store_true",
        help="Disable visualization generation"
    )

    return parser.parse_args(argv)


def apply_overrides(config: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    """Apply command-line overrides to a loaded configuration."""
    if args.strains is not None:
        config['pandemic']['num_strains'] = args.strains
    if args.iterations is not None:
        config['pandemic']['max_iterations'] = args.iterations
    if args.size is not None:
        config['problem']['size'] = args.size
    if args.seed is not None:
        config['pandemic']['seed'] = args.seed
        config['pandemic']['use_wall_clock_seed'] = False
    if args.output_dir is not None:
        config['output']['results_dir'] = args.output_dir
        config['logging']['directory'] = str(Path(args.output_dir) / 'logs')
    if args.log_level is not None:
        config['logging']['level'] = args.log_level
    if args.no_visualization:
        config['output']['visualization'] = False
    return config


def setup_output_directories(output_dir: str) -> Dict[str, Path]:
    """
    Create output directory structure for results.

    Args:
        output_dir: Base output directory path

    Returns:
        Dictionary of directory paths
    """
    base_path = Path(output_dir)

    directories = {
        "base": base_path,
        "metrics": base_path / "metrics",
        "visualizations": base_path / "visualizations",
        "logs": base_path / "logs"
    }

    for dir_path in directories.values():
        dir_path.mkdir(parents=True, exist_ok=True)

    logger.info(f"Output directories created at: {base_path.absolute()}")

    return directories


def run_cvoa(config: Dict[str, Any]) -> RunSummary:
    """
    Run every configured strain and write the run outputs.

    Args:
        config: Configuration dictionary (defaults merged)

    Returns:
        RunSummary of the run
    """
    directories = setup_output_directories(config['output']['results_dir'])
    event_logger = PandemicLogger(log_dir=directories["logs"])

    runner = create_runner_from_config(config, event_logger=event_logger)
    logger.info(f"Starting {len(runner.strain_configs)} strains for "
                f"{config['pandemic']['max_iterations']} iterations on {config['problem']['size']} bits")

    summary = runner.run()

    save_final_summary(summary, directories["metrics"], config)
    summary.history_frame().to_csv(directories["metrics"] / "history.csv", index=False)

    if config['output'].get('visualization', True):
        generate_visualizations(summary, directories["visualizations"])

    return summary


def generate_visualizations(summary: RunSummary, output_dir: Path) -> None:
    """
    Generate all visualization plots from a run.

    Args:
        summary: RunSummary with results
        output_dir: Output directory for visualizations
    """
    history = summary.history_frame()
    plot_convergence(history, output_dir / "convergence.png")
    plot_r0(history, output_dir / "r0.png")
    plot_population_sizes(summary.statistics, output_dir / "populations.png")
    logger.info(f"Visualizations saved to: {output_dir}")


def save_final_summary(summary: RunSummary, output_dir: Path, config: Dict[str, Any]) -> Path:
    """
    Save final summary of a run as JSON.

    Args:
        summary: RunSummary with results
        output_dir: Output directory for metrics
        config: Configuration dictionary

    Returns:
        Path of the written summary
    """
    payload = {
        "timestamp": datetime.now().isoformat(),
        "config": config,
        **summary.to_dict(),
    }

    summary_path = output_dir / "run_summary.json"
    with open(summary_path, 'w') as f:
        json.dump(payload, f, indent=2, default=str)

    logger.info(f"Final summary saved to: {summary_path}")

    logger.info("=" * 80)
    logger.info("RUN SUMMARY")
    logger.info("=" * 80)
    for result in summary.results:
        logger.info(f"  {result.strain_id}: {result.status} after {result.iterations} iterations, best = {result.best}")
    logger.info(f"Global best: {summary.best}")
    logger.info(f"Recovered={summary.statistics.get('recovered')} | Dead={summary.statistics.get('dead')} | "
                f"Isolated={summary.statistics.get('isolated')}")
    logger.info("=" * 80)

    return summary_path


def main(argv=None) -> int:
    """
    Main entry point.
    """
    args = parse_arguments(argv)

    try:
        config = load_config(args.config_path or args.config)
    except Exception as e:
        logging.basicConfig(level=logging.ERROR)
        logger.error(f"Failed to load configuration: {e}")
        sys.exit(1)

    config = apply_overrides(config, args)
    setup_logging(log_dir=config['logging']['directory'], log_level=config['logging']['level'])

    logger.info("=" * 80)
    logger.info("CVOA: Coronavirus Optimization Algorithm")
    logger.info("=" * 80)

    try:
        run_cvoa(config)
    except KeyboardInterrupt:
        logger.warning("Run interrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Run failed with error: {e}", exc_info=True)
        sys.exit(1)

    return 0


if __name__ == "__main__":
    sys.exit(main())
