"""Runtime helpers shared by the CLI and interactive wizard."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import torch

from .config import RestoreConfig
from .engine import RestoreEngine
from .gaussian import build_bivariate_example
from .regeneration import RegenerationDistribution
from .target import TargetModel


@dataclass(frozen=True)
class SimulationContext:
    """Holds the models and generator settings for a run."""

    target: TargetModel
    regeneration: RegenerationDistribution
    device: torch.device
    dtype: torch.dtype
    seed: Optional[int]
    save_dir: Path

    def build_engine(self, config: RestoreConfig, *, seed_offset: int = 0) -> RestoreEngine:
        generator = torch.Generator(device=self.device)
        manual_seed_or_random(generator, None if self.seed is None else self.seed + seed_offset)
        return RestoreEngine(
            self.target,
            self.regeneration,
            config.log_c,
            config.kappa_bar,
            config.n_tours,
            config.output_rate,
            generator=generator,
        )


def resolve_device(device_arg: str) -> torch.device:
    if device_arg == "auto":
        if torch.cuda.is_available():
            return torch.device("cuda")
        return torch.device("cpu")
    device = torch.device(device_arg)
    if device.type == "cuda" and not torch.cuda.is_available():
        raise RuntimeError("CUDA requested but not available.")
    return device


def precision_to_dtype(precision: str) -> torch.dtype:
    return torch.float64 if precision == "float64" else torch.float32


def manual_seed_or_random(generator: torch.Generator, seed: Optional[int]) -> None:
    if seed is not None:
        generator.manual_seed(seed)
    else:
        generator.manual_seed(torch.seed())


def create_simulation_context(
    *,
    device: str,
    precision: str,
    seed: Optional[int],
    save_dir: Path,
) -> SimulationContext:
    resolved_device = resolve_device(device)
    dtype = precision_to_dtype(precision)
    target, regeneration = build_bivariate_example(device=resolved_device, dtype=dtype)
    return SimulationContext(
        target=target,
        regeneration=regeneration,
        device=resolved_device,
        dtype=dtype,
        seed=seed,
        save_dir=save_dir.expanduser(),
    )


def fmt(value: float) -> str:
    return f"{value:.6f}"
