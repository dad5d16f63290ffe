"""Brownian motion Restore sampler with exact regeneration."""
from .config import RestoreConfig, build_default_config
from .engine import RestoreEngine
from .errors import (
    DimensionMismatchError,
    MissingCapabilityError,
    RateOverflowError,
    RestoreError,
    SeedError,
    TraceWriteError,
)
from .gaussian import build_bivariate_example, gaussian_target, isotropic_gaussian
from .regeneration import RegenerationDistribution
from .results import RestoreEvent, RestoreResult, RestoreTrace, RunSummary
from .statistics import TraceSummary, summarize_trace
from .target import TargetModel

__all__ = [
    "RestoreConfig",
    "RestoreEngine",
    "RestoreError",
    "MissingCapabilityError",
    "DimensionMismatchError",
    "RateOverflowError",
    "SeedError",
    "TraceWriteError",
    "TargetModel",
    "RegenerationDistribution",
    "RestoreTrace",
    "RestoreResult",
    "RestoreEvent",
    "RunSummary",
    "TraceSummary",
    "summarize_trace",
    "gaussian_target",
    "isotropic_gaussian",
    "build_bivariate_example",
    "build_default_config",
]
