"""Gaussian targets and regeneration distributions."""
from __future__ import annotations

import math
from typing import Sequence

import torch

from .config import _as_tensor
from .regeneration import RegenerationDistribution
from .target import TargetModel


def gaussian_log_density(state: torch.Tensor, precision: torch.Tensor) -> float:
    """Unnormalised zero-mean Gaussian log-density ``-0.5 x^T P x``."""
    return float(-0.5 * torch.dot(state, precision @ state))


def gaussian_gradient(state: torch.Tensor, precision: torch.Tensor) -> torch.Tensor:
    return -(precision @ state)


def gaussian_laplacian(state: torch.Tensor, precision: torch.Tensor) -> float:
    return float(-torch.trace(precision))


def isotropic_log_density(state: torch.Tensor, data: torch.Tensor) -> float:
    """Normalised standard multivariate normal log-density; ``data`` is unused."""
    d = state.shape[0]
    return -0.5 * d * math.log(2.0 * math.pi) - 0.5 * float(torch.dot(state, state))


def sample_isotropic(generator: torch.Generator, state: torch.Tensor, data: torch.Tensor) -> int:
    draw = torch.randn(
        state.shape,
        generator=generator,
        dtype=state.dtype,
        device=state.device,
    )
    state.copy_(draw)
    return 0


def gaussian_target(
    covariance: torch.Tensor | Sequence[Sequence[float]],
    *,
    device: torch.device = torch.device("cpu"),
    dtype: torch.dtype = torch.float64,
) -> TargetModel:
    """Zero-mean Gaussian target parameterised by its covariance matrix.

    The precision matrix is stored as the model's auxiliary data.
    """
    cov = _as_tensor(covariance, dtype=dtype, device=device)
    if cov.dim() != 2 or cov.shape[0] != cov.shape[1]:
        raise ValueError("Covariance matrix must be square.")
    if not torch.allclose(cov, cov.T, atol=1e-12, rtol=0.0):
        raise ValueError("Covariance matrix must be symmetric.")
    chol, info = torch.linalg.cholesky_ex(cov)
    if int(info) != 0:
        raise ValueError("Covariance matrix must be positive-definite.")
    precision = torch.cholesky_inverse(chol)

    return TargetModel(
        dimension=cov.shape[0],
        data=precision,
        log_density_fn=gaussian_log_density,
        gradient_fn=gaussian_gradient,
        laplacian_fn=gaussian_laplacian,
        device=device,
        dtype=dtype,
    )


def isotropic_gaussian(
    dimension: int,
    *,
    device: torch.device = torch.device("cpu"),
    dtype: torch.dtype = torch.float64,
) -> RegenerationDistribution:
    """Standard normal regeneration distribution in ``dimension`` dimensions."""
    return RegenerationDistribution(
        dimension=dimension,
        log_density_fn=isotropic_log_density,
        sampler_fn=sample_isotropic,
        data=torch.eye(dimension, dtype=dtype, device=device),
        device=device,
        dtype=dtype,
    )


def build_bivariate_example(
    *,
    device: torch.device = torch.device("cpu"),
    dtype: torch.dtype = torch.float64,
) -> tuple[TargetModel, RegenerationDistribution]:
    """Correlated bivariate Gaussian target with a standard normal regeneration."""
    covariance = [
        [1.2, 0.4],
        [0.4, 0.8],
    ]
    target = gaussian_target(covariance, device=device, dtype=dtype)
    regeneration = isotropic_gaussian(target.dimension, device=device, dtype=dtype)
    return target, regeneration
