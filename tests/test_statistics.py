from __future__ import annotations

import math

import pytest
import torch

from bmrestore import RestoreResult, summarize_trace
from bmrestore.statistics import effective_tours


def _result(states, tours) -> RestoreResult:
    states = torch.tensor(states, dtype=torch.float64)
    return RestoreResult(
        times=torch.arange(1, states.shape[0] + 1, dtype=torch.float64),
        states=states,
        tours=torch.tensor(tours, dtype=torch.long),
    )


def test_summary_of_two_tours() -> None:
    summary = summarize_trace(_result([[0.0, 0.0], [2.0, 2.0]], [0, 1]), n_tours=2)

    assert summary.mean == pytest.approx([1.0, 1.0])
    assert summary.covariance[0] == pytest.approx([2.0, 2.0])
    assert summary.covariance[1] == pytest.approx([2.0, 2.0])
    assert summary.standard_error == pytest.approx([math.sqrt(2.0) / 2.0] * 2)
    assert summary.n_outputs == 2
    assert summary.outputs_per_tour == pytest.approx(1.0)
    low, high = summary.confidence_interval[0]
    assert low < 1.0 < high


def test_outputs_within_a_tour_are_pooled() -> None:
    # Both outputs share a tour, so their deviations cancel in the block sum.
    summary = summarize_trace(_result([[0.0], [2.0], [1.0]], [0, 0, 2]), n_tours=3)
    assert summary.mean == pytest.approx([1.0])
    assert summary.standard_error == pytest.approx([0.0])
    assert summary.outputs_per_tour == pytest.approx(1.0)


def test_empty_trace_cannot_be_summarised() -> None:
    empty = RestoreResult(
        times=torch.empty(0, dtype=torch.float64),
        states=torch.empty((0, 2), dtype=torch.float64),
        tours=torch.empty(0, dtype=torch.long),
    )
    with pytest.raises(ValueError):
        summarize_trace(empty, n_tours=1)
    assert effective_tours(empty) == 0


def test_effective_tours_counts_distinct_indices() -> None:
    assert effective_tours(_result([[0.0], [1.0], [2.0], [3.0]], [0, 0, 2, 5])) == 3
