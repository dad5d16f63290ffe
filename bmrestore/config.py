"""Configuration helpers for the Restore sampler."""
from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import Sequence

import torch


def _as_tensor(
    data: torch.Tensor | Sequence[float] | Sequence[Sequence[float]] | None,
    *,
    dtype: torch.dtype,
    device: torch.device,
) -> torch.Tensor:
    if data is None:
        return torch.empty((0, 0), dtype=dtype, device=device)
    tensor = torch.as_tensor(data, dtype=dtype, device=device)
    if tensor.dim() == 0:
        raise ValueError("Tensor data must not be scalar.")
    return tensor


@dataclass(frozen=True)
class RestoreConfig:
    """Scalars controlling a Restore run.

    ``log_kappa_bar`` is derived from ``kappa_bar`` and recomputed whenever a
    new config is built, so ``dataclasses.replace`` keeps the two in sync.
    """

    log_c: float
    kappa_bar: float
    n_tours: int = 10000
    output_rate: float = 1.0
    log_kappa_bar: float = field(init=False, repr=False)

    def __post_init__(self) -> None:
        log_c = float(self.log_c)
        kappa_bar = float(self.kappa_bar)
        output_rate = float(self.output_rate)
        n_tours = int(self.n_tours)

        if not math.isfinite(log_c):
            raise ValueError("logC must be finite.")
        if not math.isfinite(kappa_bar) or kappa_bar <= 0:
            raise ValueError("kappa_bar must be strictly positive and finite.")
        if not math.isfinite(output_rate) or output_rate <= 0:
            raise ValueError("Output rate must be strictly positive and finite.")

        object.__setattr__(self, "log_c", log_c)
        object.__setattr__(self, "kappa_bar", kappa_bar)
        object.__setattr__(self, "output_rate", output_rate)
        object.__setattr__(self, "n_tours", n_tours)
        object.__setattr__(self, "log_kappa_bar", math.log(kappa_bar))


def build_default_config(*, n_tours: int = 100, output_rate: float = 1000.0) -> RestoreConfig:
    """Constants tuned for the bivariate Gaussian example."""
    return RestoreConfig(
        log_c=2.07,
        kappa_bar=100.0,
        n_tours=n_tours,
        output_rate=output_rate,
    )
