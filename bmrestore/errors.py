"""Exceptions raised by the Restore sampler."""
from __future__ import annotations

from typing import Sequence


class RestoreError(Exception):
    """Base class for every sampler failure."""


class MissingCapabilityError(RestoreError, ValueError):
    """A target model lacks an evaluator the rate function needs."""

    def __init__(self, missing: Sequence[str]) -> None:
        self.missing = tuple(missing)
        names = ", ".join(self.missing)
        super().__init__(f"Target model doesn't provide: {names}.")


class DimensionMismatchError(RestoreError, ValueError):
    """Target model and regeneration distribution disagree on dimension."""

    def __init__(self, target_dimension: int, regeneration_dimension: int) -> None:
        self.target_dimension = target_dimension
        self.regeneration_dimension = regeneration_dimension
        super().__init__(
            f"Regeneration dimension {regeneration_dimension} does not match "
            f"target dimension {target_dimension}."
        )


class RateOverflowError(RestoreError, ArithmeticError):
    """The regeneration rate evaluated to NaN or infinity."""


class SeedError(RestoreError, RuntimeError):
    """The generator was reseeded after random numbers had been drawn."""


class TraceWriteError(RestoreError, OSError):
    """Trace output could not be written to the requested destination."""
