from __future__ import annotations

import matplotlib

matplotlib.use("Agg")

import pytest
import torch

from bmrestore import RestoreEngine, build_bivariate_example

LOG_C = 2.07
KAPPA_BAR = 100.0


def seeded(seed: int) -> torch.Generator:
    generator = torch.Generator()
    generator.manual_seed(seed)
    return generator


@pytest.fixture
def bivariate():
    return build_bivariate_example()


@pytest.fixture
def make_engine(bivariate):
    target, regeneration = bivariate

    def _make(*, n_tours: int = 10, output_rate: float = 100.0, seed: int = 1234, **kwargs) -> RestoreEngine:
        return RestoreEngine(
            target,
            regeneration,
            kwargs.pop("log_c", LOG_C),
            kwargs.pop("kappa_bar", KAPPA_BAR),
            n_tours,
            output_rate,
            generator=seeded(seed),
        )

    return _make
