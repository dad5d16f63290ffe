"""Visualization utilities for Restore traces."""
from __future__ import annotations

from typing import Tuple

import matplotlib.pyplot as plt
import numpy as np

from .results import RestoreResult


__all__ = (
    "plot_trace",
    "plot_marginals",
)


def plot_trace(
    result: RestoreResult,
    *,
    max_points: int = 5000,
    show_regenerations: bool = True,
    ax: plt.Axes | None = None,
) -> Tuple[plt.Figure, plt.Axes]:
    if ax is None:
        fig, ax = plt.subplots()
    else:
        fig = ax.figure

    times = result.times[:max_points].detach().cpu().numpy()
    states = result.states[:max_points].detach().cpu().numpy()
    tours = result.tours[:max_points].detach().cpu().numpy()
    for coord in range(states.shape[1]):
        ax.plot(times, states[:, coord], linewidth=0.9, alpha=0.85, label=f"x[{coord}]")

    if show_regenerations and tours.size > 1:
        # First output of each new tour marks a regeneration that happened before it.
        boundaries = times[1:][np.diff(tours) > 0]
        for boundary in boundaries:
            ax.axvline(boundary, color="grey", linewidth=0.5, alpha=0.3)

    ax.set_xlabel("Time")
    ax.set_ylabel("State")
    ax.set_title("Restore process trace")
    ax.grid(True, alpha=0.2)
    if states.shape[1] <= 6:
        ax.legend(loc="upper right", fontsize="small")
    return fig, ax


def plot_marginals(
    result: RestoreResult,
    *,
    bins: int = 60,
) -> Tuple[plt.Figure, np.ndarray]:
    """Histogram per coordinate, plus a scatter plot in two dimensions."""
    states = result.states.detach().cpu().numpy()
    dimension = states.shape[1]
    n_panels = dimension + 1 if dimension == 2 else dimension
    fig, axes = plt.subplots(1, n_panels, figsize=(4 * n_panels, 3.5), squeeze=False)
    axes = axes[0]

    for coord in range(dimension):
        ax = axes[coord]
        ax.hist(states[:, coord], bins=bins, density=True, alpha=0.75, color="#1f77b4", edgecolor="black")
        ax.set_xlabel(f"x[{coord}]")
        ax.set_ylabel("Density")
        ax.grid(True, alpha=0.2)

    if dimension == 2:
        ax = axes[2]
        ax.scatter(states[:, 0], states[:, 1], s=2, alpha=0.3)
        ax.set_xlabel("x[0]")
        ax.set_ylabel("x[1]")
        ax.set_title("Joint samples")
        ax.grid(True, alpha=0.2)

    fig.suptitle("Restore output marginals")
    fig.tight_layout()
    return fig, axes
