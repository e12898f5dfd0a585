"""
Logging utilities for the CVOA framework.

This module provides logging infrastructure including:
- Standard logging setup with file and console handlers
- PandemicLogger for structured JSON-lines records of a run
- Dataclasses for per-iteration and per-strain records
"""

import json
import logging
import threading
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass
class IterationLog:
    """Data class for logging one propagation step of a strain."""
    strain_id: str
    iteration: int
    global_best_fitness: float
    strain_best_fitness: float
    infected: int
    new_infected: int
    r0: float
    recovered: int = 0
    dead: int = 0
    isolated: int = 0
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


@dataclass
class StrainLog:
    """Data class for logging a finished strain."""
    strain_id: str
    status: str
    iterations: int
    best_fitness: float
    best_bits: str
    discovering_iteration: Optional[int] = None
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


class PandemicLogger:
    """
    Structured logger for a CVOA run.

    Strains call it concurrently, so every file append happens under a lock.
    Records are written as JSON lines:
    - iterations.jsonl: one IterationLog per propagation step
    - strains.jsonl: one StrainLog per finished strain
    """

    def __init__(self, log_dir: str, log_level: Optional[int] = None):
        """
        Initialize the pandemic logger.

        Args:
            log_dir: Directory to store log files
            log_level: Logging level; None keeps the level set by setup_logging
        """
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.logger = logging.getLogger('CVOA')
        if log_level is not None:
            self.logger.setLevel(log_level)

        self.iteration_log_file = self.log_dir / 'iterations.jsonl'
        self.strain_log_file = self.log_dir / 'strains.jsonl'

        self._lock = threading.Lock()
        self.total_iterations = 0
        self.finished_strains: List[Dict[str, Any]] = []

        self.logger.info(f"PandemicLogger initialized at {self.log_dir}")

    def _append(self, path: Path, record: Dict[str, Any]) -> None:
        with self._lock:
            with open(path, 'a') as f:
                f.write(json.dumps(record) + '\n')

    def log_iteration(self, iteration_log: IterationLog) -> None:
        """
        Log one propagation step.

        Args:
            iteration_log: IterationLog dataclass instance
        """
        self._append(self.iteration_log_file, iteration_log.to_dict())
        with self._lock:
            self.total_iterations += 1

    def log_strain_finished(self, strain_log: StrainLog) -> None:
        """
        Log a strain reaching a terminal state.

        Args:
            strain_log: StrainLog dataclass instance
        """
        record = strain_log.to_dict()
        self._append(self.strain_log_file, record)
        with self._lock:
            self.finished_strains.append(record)

        self.logger.info(
            f"Strain {strain_log.strain_id} {strain_log.status} after {strain_log.iterations} iterations | "
            f"Best=[{strain_log.best_bits}] fitness={strain_log.best_fitness:.4g}"
        )

    def log_error(self, error: Exception, context: str = "") -> None:
        """Log an error with context."""
        self.logger.error(f"Error in {context}: {str(error)}", exc_info=error)

    def read_iterations(self, strain_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Read back iteration records, optionally filtered by strain.

        Args:
            strain_id: Only return records of this strain if given

        Returns:
            List of iteration dictionaries in file order
        """
        if not self.iteration_log_file.exists():
            return []

        records = []
        with open(self.iteration_log_file, 'r') as f:
            for line in f:
                record = json.loads(line.strip())
                if strain_id is None or record.get('strain_id') == strain_id:
                    records.append(record)
        return records

    def get_run_summary(self) -> Dict[str, Any]:
        """
        Summarize the strains logged so far.

        Returns:
            Dictionary with overall statistics
        """
        with self._lock:
            finished = list(self.finished_strains)
            total_iterations = self.total_iterations

        best = min(finished, key=lambda s: s['best_fitness']) if finished else None
        return {
            'total_iterations': total_iterations,
            'finished_strains': len(finished),
            'converged_strains': sum(1 for s in finished if s['status'] == 'converged'),
            'best_fitness': best['best_fitness'] if best else None,
            'best_strain': best['strain_id'] if best else None,
        }


def setup_logging(
    log_dir: str = "results/logs",
    log_level: Any = "INFO",
    log_to_file: bool = True,
    log_to_console: bool = True,
) -> logging.Logger:
    """
    Set up standard logging configuration for the CVOA framework.

    Both the 'CVOA' logger and the 'cvoa' package loggers are routed to the
    configured handlers.

    Args:
        log_dir: Directory to store log files
        log_level: Logging level as string ('DEBUG', 'INFO', ...) or int
        log_to_file: Whether to log to file
        log_to_console: Whether to log to console

    Returns:
        Configured logger instance
    """
    level_map = {
        'DEBUG': logging.DEBUG,
        'INFO': logging.INFO,
        'WARNING': logging.WARNING,
        'ERROR': logging.ERROR,
        'CRITICAL': logging.CRITICAL
    }
    if isinstance(log_level, int):
        log_level_int = log_level
    else:
        log_level_int = level_map.get(str(log_level).upper(), logging.INFO)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    handlers: List[logging.Handler] = []

    if log_to_console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level_int)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    if log_to_file:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path / 'cvoa.log', mode='a')
        file_handler.setLevel(log_level_int)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

        # Error log file (separate file for errors only)
        error_handler = logging.FileHandler(log_path / 'errors.log', mode='a')
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(formatter)
        handlers.append(error_handler)

    for name in ('CVOA', 'cvoa'):
        named = logging.getLogger(name)
        named.setLevel(log_level_int)
        named.handlers = list(handlers)
        named.propagate = False

    logger = logging.getLogger('CVOA')
    logger.info(f"Logging initialized at level {log_level} to {log_dir}")

    return logger


def get_logger(name: str = 'CVOA') -> logging.Logger:
    """
    Get a logger instance by name.

    Args:
        name: Logger name (default: 'CVOA')

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
