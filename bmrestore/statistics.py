"""Regenerative summary statistics for Restore traces."""
from __future__ import annotations

from dataclasses import dataclass

import torch

from .results import RestoreResult


@dataclass
class TraceSummary:
    mean: list[float]
    standard_deviation: list[float]
    standard_error: list[float]
    covariance: list[list[float]]
    confidence_interval: list[tuple[float, float]]
    n_outputs: int
    n_tours: int
    outputs_per_tour: float


def summarize_trace(result: RestoreResult, n_tours: int) -> TraceSummary:
    """Estimate target moments from the recorded outputs.

    Outputs arrive at the times of a Poisson clock, so their plain average
    estimates the target mean. Standard errors treat each tour as an
    independent block (regenerative ratio estimator); tours without outputs
    still count towards ``n_tours``.
    """
    n_outputs = len(result)
    if n_outputs == 0:
        raise ValueError("Cannot summarise an empty trace.")
    if n_tours <= 0:
        raise ValueError("Number of tours must be positive.")

    states = result.states
    mean = states.mean(dim=0)
    centred = states - mean
    if n_outputs > 1:
        covariance = centred.T @ centred / (n_outputs - 1)
    else:
        covariance = torch.zeros((states.shape[1], states.shape[1]), dtype=states.dtype, device=states.device)
    std = torch.sqrt(torch.diagonal(covariance))

    n_blocks = max(n_tours, int(result.tours.max()) + 1)
    block_sums = torch.zeros((n_blocks, states.shape[1]), dtype=states.dtype, device=states.device)
    block_sums.index_add_(0, result.tours, centred)
    # Var(ratio estimator) ~ sum_k Z_k^2 / (sum_k N_k)^2
    stderr = torch.sqrt(block_sums.pow(2).sum(dim=0)) / n_outputs

    ci_low = mean - 1.96 * stderr
    ci_high = mean + 1.96 * stderr
    return TraceSummary(
        mean=mean.cpu().tolist(),
        standard_deviation=std.cpu().tolist(),
        standard_error=stderr.cpu().tolist(),
        covariance=covariance.cpu().tolist(),
        confidence_interval=list(zip(ci_low.cpu().tolist(), ci_high.cpu().tolist())),
        n_outputs=n_outputs,
        n_tours=n_tours,
        outputs_per_tour=n_outputs / n_tours,
    )


def effective_tours(result: RestoreResult) -> int:
    """Number of distinct tours that produced at least one output."""
    if len(result) == 0:
        return 0
    return int(torch.unique(result.tours).numel())
