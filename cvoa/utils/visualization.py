"""
Visualization utilities for CVOA.

These helpers take the per-iteration history of a run (a DataFrame built by
RunSummary.history_frame) and always emit a figure, even for empty input.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Union

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt


def _prepare_output_path(output_path: Union[str, Path]) -> Path:
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def _save_figure(fig: plt.Figure, output_path: Union[str, Path]) -> None:
    path = _prepare_output_path(output_path)
    fig.tight_layout()
    fig.savefig(path, dpi=150, bbox_inches="tight")
    plt.close(fig)


def _empty_figure(message: str, output_path: Union[str, Path]) -> None:
    fig, ax = plt.subplots(figsize=(10, 5))
    ax.text(0.5, 0.5, message, ha="center", va="center")
    ax.set_axis_off()
    _save_figure(fig, output_path)


def plot_convergence(
    history: pd.DataFrame,
    output_path: Union[str, Path],
) -> None:
    """Plot best strain fitness per iteration for every strain, plus the global best."""
    if history is None or history.empty:
        _empty_figure("No iteration history", output_path)
        return

    fig, ax = plt.subplots(figsize=(10, 5))

    for strain_id, group in history.groupby("strain_id", sort=False):
        ax.plot(group["iteration"], group["strain_best_fitness"], label=str(strain_id), linewidth=1.5, alpha=0.8)

    global_best = history.groupby("iteration")["global_best_fitness"].min()
    global_best = global_best[np.isfinite(global_best)]
    ax.plot(global_best.index, global_best.values, label="Global best", color="black", linewidth=2, linestyle="--")

    ax.set_title("Convergence")
    ax.set_xlabel("Iteration")
    ax.set_ylabel("Best Fitness")
    ax.legend()
    ax.grid(alpha=0.2)
    _save_figure(fig, output_path)


def plot_r0(
    history: pd.DataFrame,
    output_path: Union[str, Path],
) -> None:
    """Plot the reproduction number R0 per iteration for every strain."""
    if history is None or history.empty:
        _empty_figure("No iteration history", output_path)
        return

    fig, ax = plt.subplots(figsize=(10, 5))

    for strain_id, group in history.groupby("strain_id", sort=False):
        ax.plot(group["iteration"], group["r0"], label=str(strain_id), linewidth=1.5, alpha=0.8)

    ax.axhline(1.0, color="tab:red", linestyle=":", linewidth=1)
    ax.set_title("Reproduction Number (R0)")
    ax.set_xlabel("Iteration")
    ax.set_ylabel("R0")
    ax.legend()
    ax.grid(alpha=0.2)
    _save_figure(fig, output_path)


def plot_population_sizes(
    statistics: Dict[str, Any],
    output_path: Union[str, Path],
) -> None:
    """Bar chart of the final recovered/dead/isolated set sizes."""
    names = [name for name in ("recovered", "dead", "isolated") if name in (statistics or {})]
    if not names:
        _empty_figure("No pandemic statistics", output_path)
        return

    fig, ax = plt.subplots(figsize=(7, 5))
    counts = [int(statistics[name]) for name in names]
    ax.bar(names, counts, color=["tab:green", "tab:gray", "tab:blue"][:len(names)], alpha=0.8)
    ax.set_title("Shared Populations")
    ax.set_ylabel("Individuals")
    ax.grid(axis="y", alpha=0.2)
    _save_figure(fig, output_path)
