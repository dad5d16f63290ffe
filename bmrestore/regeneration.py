"""Regeneration distribution used to start every tour."""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable

import torch

from .config import _as_tensor

RegenLogDensityFn = Callable[[torch.Tensor, torch.Tensor], float]
SamplerFn = Callable[[torch.Generator, torch.Tensor, torch.Tensor], int]


@dataclass(frozen=True)
class RegenerationDistribution:
    """Easy-to-sample distribution the process restarts from.

    ``sampler_fn(generator, state, data)`` overwrites ``state`` in place with
    a fresh draw and returns the number of target evaluations it spent (zero
    for closed-form samplers). The density must be positive wherever the
    target is.
    """

    dimension: int
    log_density_fn: RegenLogDensityFn
    sampler_fn: SamplerFn
    data: torch.Tensor | None = None
    device: torch.device = torch.device("cpu")
    dtype: torch.dtype = torch.float64

    def __post_init__(self) -> None:
        if self.dimension < 1:
            raise ValueError("Dimension must be greater than or equal to 1.")
        object.__setattr__(self, "data", _as_tensor(self.data, dtype=self.dtype, device=self.device))

    def with_data(self, data: torch.Tensor) -> "RegenerationDistribution":
        return replace(self, data=data)

    def log_density(self, state: torch.Tensor) -> float:
        return float(self.log_density_fn(state, self.data))

    def energy(self, state: torch.Tensor) -> float:
        return -self.log_density(state)

    def sample(self, generator: torch.Generator, state: torch.Tensor) -> int:
        cost = int(self.sampler_fn(generator, state, self.data))
        if cost < 0:
            raise ValueError("Sampler must report a non-negative evaluation cost.")
        return cost
