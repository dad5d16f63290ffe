from __future__ import annotations

import math

import pytest
import torch

from bmrestore import build_bivariate_example, gaussian_target, isotropic_gaussian


def test_bivariate_precision_is_inverse_covariance() -> None:
    target, regeneration = build_bivariate_example()

    expected = torch.tensor([[1.0, -0.5], [-0.5, 1.5]], dtype=torch.float64)
    assert torch.allclose(target.data, expected, atol=1e-12)
    assert target.dimension == regeneration.dimension == 2


def test_gaussian_target_evaluators() -> None:
    target = gaussian_target([[1.2, 0.4], [0.4, 0.8]])
    state = torch.tensor([1.0, 0.0], dtype=torch.float64)

    assert target.log_density(state) == pytest.approx(-0.5)
    assert torch.allclose(target.gradient(state), torch.tensor([-1.0, 0.5], dtype=torch.float64))
    assert target.laplacian(state) == pytest.approx(-2.5)


@pytest.mark.parametrize(
    "covariance",
    [
        [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]],
        [[1.0, 0.3], [0.2, 1.0]],
        [[1.0, 2.0], [2.0, 1.0]],
    ],
)
def test_gaussian_target_rejects_invalid_covariance(covariance) -> None:
    with pytest.raises(ValueError):
        gaussian_target(covariance)


def test_isotropic_log_density_is_normalised() -> None:
    regeneration = isotropic_gaussian(2)
    origin = torch.zeros(2, dtype=torch.float64)
    assert regeneration.log_density(origin) == pytest.approx(-math.log(2.0 * math.pi))
    assert regeneration.energy(origin) == pytest.approx(math.log(2.0 * math.pi))


def test_isotropic_sampler_overwrites_state_at_no_cost() -> None:
    regeneration = isotropic_gaussian(4)
    generator = torch.Generator()
    generator.manual_seed(7)
    state = torch.full((4,), 100.0, dtype=torch.float64)

    cost = regeneration.sample(generator, state)

    assert cost == 0
    assert torch.all(state.abs() < 10.0)


def test_isotropic_sampler_is_seed_deterministic() -> None:
    regeneration = isotropic_gaussian(3)
    draws = []
    for _ in range(2):
        generator = torch.Generator()
        generator.manual_seed(99)
        state = torch.empty(3, dtype=torch.float64)
        regeneration.sample(generator, state)
        draws.append(state)
    assert torch.equal(draws[0], draws[1])


def test_negative_sampler_cost_is_rejected() -> None:
    regeneration = isotropic_gaussian(2)
    broken = type(regeneration)(
        dimension=2,
        log_density_fn=regeneration.log_density_fn,
        sampler_fn=lambda generator, state, data: -1,
    )
    with pytest.raises(ValueError):
        broken.sample(torch.Generator(), torch.zeros(2, dtype=torch.float64))
