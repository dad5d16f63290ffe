"""Target density wrapper exposing log-density, gradient and Laplacian."""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, Optional

import torch

from .config import _as_tensor
from .errors import MissingCapabilityError

LogDensityFn = Callable[[torch.Tensor, torch.Tensor], float]
GradientFn = Callable[[torch.Tensor, torch.Tensor], torch.Tensor]
LaplacianFn = Callable[[torch.Tensor, torch.Tensor], float]


@dataclass(frozen=True)
class TargetModel:
    """Unnormalised target density over a ``dimension``-dimensional space.

    Each evaluator receives the state and the auxiliary ``data`` tensor. An
    evaluator left as ``None`` has not been provided yet; the engine refuses
    to run on an incomplete model because the regeneration rate needs all
    three. Evaluators must describe the same density, which is not checked.
    """

    dimension: int
    data: torch.Tensor | None = None
    log_density_fn: Optional[LogDensityFn] = None
    gradient_fn: Optional[GradientFn] = None
    laplacian_fn: Optional[LaplacianFn] = None
    device: torch.device = torch.device("cpu")
    dtype: torch.dtype = torch.float64

    def __post_init__(self) -> None:
        if self.dimension < 1:
            raise ValueError("Dimension must be greater than or equal to 1.")
        object.__setattr__(self, "data", _as_tensor(self.data, dtype=self.dtype, device=self.device))

    def with_data(self, data: torch.Tensor) -> "TargetModel":
        return replace(self, data=data)

    def with_log_density(self, fn: LogDensityFn) -> "TargetModel":
        return replace(self, log_density_fn=fn)

    def with_gradient(self, fn: GradientFn) -> "TargetModel":
        return replace(self, gradient_fn=fn)

    def with_laplacian(self, fn: LaplacianFn) -> "TargetModel":
        return replace(self, laplacian_fn=fn)

    def missing_capabilities(self) -> tuple[str, ...]:
        slots = (
            ("log_density", self.log_density_fn),
            ("gradient", self.gradient_fn),
            ("laplacian", self.laplacian_fn),
        )
        return tuple(name for name, fn in slots if fn is None)

    @property
    def is_complete(self) -> bool:
        return not self.missing_capabilities()

    def log_density(self, state: torch.Tensor) -> float:
        if self.log_density_fn is None:
            raise MissingCapabilityError(["log_density"])
        return float(self.log_density_fn(state, self.data))

    def gradient(self, state: torch.Tensor, out: torch.Tensor | None = None) -> torch.Tensor:
        """Gradient of the log-density, written into ``out`` when given."""
        if self.gradient_fn is None:
            raise MissingCapabilityError(["gradient"])
        grad = torch.as_tensor(self.gradient_fn(state, self.data), dtype=self.dtype, device=self.device)
        if grad.shape != (self.dimension,):
            raise ValueError(f"Gradient must have shape ({self.dimension},), got {tuple(grad.shape)}.")
        if out is None:
            return grad
        out.copy_(grad)
        return out

    def laplacian(self, state: torch.Tensor) -> float:
        """Trace of the Hessian of the log-density."""
        if self.laplacian_fn is None:
            raise MissingCapabilityError(["laplacian"])
        return float(self.laplacian_fn(state, self.data))

    def energy(self, state: torch.Tensor) -> float:
        return -self.log_density(state)

    def grad_energy(self, state: torch.Tensor, out: torch.Tensor | None = None) -> torch.Tensor:
        if out is None:
            return -self.gradient(state)
        return self.gradient(state, out).neg_()

    def laplacian_energy(self, state: torch.Tensor) -> float:
        return -self.laplacian(state)
