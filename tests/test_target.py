from __future__ import annotations

import pytest
import torch

from bmrestore import MissingCapabilityError, TargetModel


def _log_density(state: torch.Tensor, data: torch.Tensor) -> float:
    return float(-0.5 * torch.dot(state, state))


def _gradient(state: torch.Tensor, data: torch.Tensor) -> torch.Tensor:
    return -state


def _laplacian(state: torch.Tensor, data: torch.Tensor) -> float:
    return -float(state.shape[0])


def _standard_normal(dimension: int = 3) -> TargetModel:
    return TargetModel(
        dimension=dimension,
        log_density_fn=_log_density,
        gradient_fn=_gradient,
        laplacian_fn=_laplacian,
    )


def test_energy_forms_negate_log_density_forms() -> None:
    model = _standard_normal()
    state = torch.tensor([1.0, -2.0, 0.5], dtype=torch.float64)

    assert model.log_density(state) == pytest.approx(-2.625)
    assert model.energy(state) == pytest.approx(2.625)
    assert torch.allclose(model.gradient(state), -state)
    assert torch.allclose(model.grad_energy(state), state)
    assert model.laplacian(state) == pytest.approx(-3.0)
    assert model.laplacian_energy(state) == pytest.approx(3.0)


def test_gradient_writes_into_caller_storage() -> None:
    model = _standard_normal()
    state = torch.tensor([1.0, 2.0, 3.0], dtype=torch.float64)
    out = torch.empty(3, dtype=torch.float64)

    returned = model.grad_energy(state, out=out)

    assert returned is out
    assert torch.allclose(out, state)
    # the state itself must not be touched
    assert torch.equal(state, torch.tensor([1.0, 2.0, 3.0], dtype=torch.float64))


def test_gradient_shape_is_checked() -> None:
    model = _standard_normal().with_gradient(lambda state, data: torch.zeros(2, dtype=torch.float64))
    with pytest.raises(ValueError):
        model.gradient(torch.zeros(3, dtype=torch.float64))


def test_missing_capabilities_are_reported() -> None:
    partial = TargetModel(dimension=2, log_density_fn=_log_density)

    assert partial.missing_capabilities() == ("gradient", "laplacian")
    assert not partial.is_complete
    with pytest.raises(MissingCapabilityError):
        partial.laplacian(torch.zeros(2, dtype=torch.float64))

    completed = partial.with_gradient(_gradient).with_laplacian(_laplacian)
    assert completed.is_complete
    assert partial.missing_capabilities() == ("gradient", "laplacian")


def test_dimension_must_be_positive() -> None:
    with pytest.raises(ValueError):
        TargetModel(dimension=0)


def test_data_is_passed_to_evaluators() -> None:
    model = TargetModel(
        dimension=1,
        data=[[3.0]],
        log_density_fn=lambda state, data: float(data[0, 0] * state[0]),
        gradient_fn=_gradient,
        laplacian_fn=_laplacian,
    )
    assert model.log_density(torch.tensor([2.0], dtype=torch.float64)) == pytest.approx(6.0)
    assert model.with_data([[1.0]]).log_density(torch.tensor([2.0], dtype=torch.float64)) == pytest.approx(2.0)
