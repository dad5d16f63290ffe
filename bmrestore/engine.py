"""Brownian motion Restore sampler using PyTorch."""
from __future__ import annotations

from dataclasses import replace
import logging
import math
import time
from typing import Callable, Optional

import torch

from .config import RestoreConfig
from .errors import DimensionMismatchError, MissingCapabilityError, RateOverflowError, SeedError
from .regeneration import RegenerationDistribution
from .results import (
    OUTPUT,
    REGENERATION,
    REJECTED,
    RestoreEvent,
    RestoreResult,
    RestoreTrace,
    RunSummary,
)
from .target import TargetModel

logger = logging.getLogger(__name__)

# log-density, gradient and Laplacian of the target
EVALS_PER_CANDIDATE = 3


class RestoreEngine:
    """Simulates a Brownian motion that regenerates at a state-dependent rate.

    Candidate regeneration times come from a homogeneous Poisson process of
    rate ``kappa_bar`` and are thinned with probability ``kappa(x) / kappa_bar``.
    An independent Poisson clock of rate ``output_rate`` decides when the
    path is recorded. Sampling is exact as long as ``kappa(x) <= kappa_bar``
    at every visited state.

    All randomness comes from ``generator``; draws happen in a fixed order
    (two exponentials, ``d`` normals, then a uniform for candidates and the
    regeneration sampler on acceptance), so equal seeds give equal traces.
    """

    def __init__(
        self,
        target: TargetModel,
        regeneration: RegenerationDistribution,
        log_c: float,
        kappa_bar: float,
        n_tours: int = 10000,
        output_rate: float = 1.0,
        *,
        generator: torch.Generator | None = None,
    ) -> None:
        missing = target.missing_capabilities()
        if missing:
            raise MissingCapabilityError(missing)
        if regeneration.dimension != target.dimension:
            raise DimensionMismatchError(target.dimension, regeneration.dimension)

        self.target = target
        self.regeneration = regeneration
        self.config = RestoreConfig(
            log_c=log_c,
            kappa_bar=kappa_bar,
            n_tours=n_tours,
            output_rate=output_rate,
        )

        if generator is None:
            generator = torch.Generator(device=target.device)
            generator.manual_seed(torch.seed())
        self.generator = generator

        self._dtype = target.dtype
        self._device = target.device
        self._state = torch.zeros(target.dimension, dtype=self._dtype, device=self._device)
        self._grad = torch.empty_like(self._state)

        self._t_current = 0.0
        self._tour_current = 0
        self._n_evals = 0
        self._n_candidates = 0
        self._bound_violations = 0
        self._initialised = False
        self._draws_started = False
        self._seeded = False
        self._warned_bound = False

        self.trace = RestoreTrace()

    # Mutators

    def set_regeneration(self, regeneration: RegenerationDistribution) -> None:
        if regeneration.dimension != self.target.dimension:
            raise DimensionMismatchError(self.target.dimension, regeneration.dimension)
        self.regeneration = regeneration

    def set_log_c(self, log_c: float) -> None:
        self.config = replace(self.config, log_c=log_c)

    def set_kappa_bar(self, kappa_bar: float) -> None:
        self.config = replace(self.config, kappa_bar=kappa_bar)

    def set_n_tours(self, n_tours: int) -> None:
        self.config = replace(self.config, n_tours=n_tours)

    def set_output_rate(self, output_rate: float) -> None:
        self.config = replace(self.config, output_rate=output_rate)

    def set_seed(self, seed: int) -> None:
        """Seed the generator. Only allowed once, before the first random draw."""
        if self._draws_started:
            raise SeedError("Cannot reseed after random numbers have been drawn.")
        if self._seeded:
            raise SeedError("Generator has already been seeded.")
        self._seeded = True
        self.generator.manual_seed(seed)

    # Read-outs

    @property
    def dimension(self) -> int:
        return self.target.dimension

    @property
    def n_evals(self) -> int:
        """Sum of target log-density, gradient and Laplacian evaluations."""
        return self._n_evals

    @property
    def log_c(self) -> float:
        return self.config.log_c

    @property
    def kappa_bar(self) -> float:
        return self.config.kappa_bar

    @property
    def log_kappa_bar(self) -> float:
        return self.config.log_kappa_bar

    @property
    def n_tours(self) -> int:
        return self.config.n_tours

    @property
    def output_rate(self) -> float:
        return self.config.output_rate

    @property
    def current_time(self) -> float:
        return self._t_current

    @property
    def current_tour(self) -> int:
        return self._tour_current

    @property
    def candidates_evaluated(self) -> int:
        return self._n_candidates

    @property
    def bound_violations(self) -> int:
        """Number of accepted candidates where ``kappa(x)`` exceeded ``kappa_bar``."""
        return self._bound_violations

    @property
    def state(self) -> torch.Tensor:
        return self._state.clone()

    @property
    def is_complete(self) -> bool:
        return self._tour_current >= self.config.n_tours

    # Rate function

    def kappa_partial(self, state: torch.Tensor) -> float:
        """Gradient/curvature part of the rate, ``0.5 * (|grad U|^2 - lap U)``."""
        grad = self.target.grad_energy(state, out=self._grad)
        return 0.5 * (float(torch.dot(grad, grad)) - self.target.laplacian_energy(state))

    def kappa(self, state: torch.Tensor) -> float:
        """Regeneration rate at ``state``."""
        log_ratio = self.config.log_c + self.regeneration.log_density(state) - self.target.log_density(state)
        try:
            ratio = math.exp(log_ratio)
        except OverflowError as exc:
            raise RateOverflowError(f"Density ratio overflowed (log ratio {log_ratio:.6g}).") from exc
        rate = self.kappa_partial(state) + ratio
        if not math.isfinite(rate):
            raise RateOverflowError(f"Regeneration rate is not finite: {rate}.")
        return rate

    # Simulation

    def _regenerate(self) -> None:
        self._draws_started = True
        self._n_evals += self.regeneration.sample(self.generator, self._state)

    def _ensure_initialised(self) -> None:
        if not self._initialised:
            self._regenerate()
            self._initialised = True

    def _propagate(self, elapsed: float) -> None:
        shocks = torch.randn(
            (self.target.dimension,),
            generator=self.generator,
            dtype=self._dtype,
            device=self._device,
        )
        self._state.add_(shocks, alpha=math.sqrt(elapsed))
        self._t_current += elapsed

    def advance_one_step(self) -> RestoreEvent:
        """Advance to the sooner of the next candidate regeneration or output."""
        self._ensure_initialised()

        clocks = torch.empty(2, dtype=self._dtype, device=self._device).exponential_(generator=self.generator)
        unit_regen, unit_output = clocks.tolist()
        t_next_potential_regen = unit_regen / self.config.kappa_bar
        t_next_output = unit_output / self.config.output_rate

        if t_next_potential_regen < t_next_output:
            self._propagate(t_next_potential_regen)

            u = float(torch.rand((), generator=self.generator, dtype=self._dtype, device=self._device))
            self._n_evals += EVALS_PER_CANDIDATE
            self._n_candidates += 1
            rate = self.kappa(self._state)

            # A non-positive rate can never beat the thinning test.
            if rate <= 0:
                return RestoreEvent(kind=REJECTED, time=self._t_current, tour=self._tour_current, rate=rate)

            log_u = math.log(u) if u > 0 else -math.inf
            if log_u < math.log(rate) - self.config.log_kappa_bar:
                if rate > self.config.kappa_bar:
                    self._record_bound_violation(rate)
                self._regenerate()
                self._tour_current += 1
                return RestoreEvent(kind=REGENERATION, time=self._t_current, tour=self._tour_current, rate=rate)
            return RestoreEvent(kind=REJECTED, time=self._t_current, tour=self._tour_current, rate=rate)

        self._propagate(t_next_output)
        self.trace.append(self._t_current, self._state, self._tour_current)
        return RestoreEvent(kind=OUTPUT, time=self._t_current, tour=self._tour_current)

    def _record_bound_violation(self, rate: float) -> None:
        self._bound_violations += 1
        if not self._warned_bound:
            self._warned_bound = True
            logger.warning(
                "Regeneration rate %.6g exceeds kappa_bar %.6g; samples are no longer exact.",
                rate,
                self.config.kappa_bar,
            )

    def run(
        self,
        *,
        time_budget: Optional[float] = None,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> RunSummary:
        """Simulate until ``n_tours`` regenerations have been accepted.

        A second call resumes from the current state and keeps appending to
        the same trace, which only does work if ``n_tours`` was raised in
        between. ``time_budget`` (seconds) and ``should_stop`` are checked
        once per step and end the run early.
        """
        if time_budget is not None and time_budget <= 0:
            raise ValueError("Time budget must be positive.")

        self._ensure_initialised()
        self._warned_bound = False

        start_tour = self._tour_current
        start_outputs = len(self.trace)
        start_candidates = self._n_candidates
        steps = 0
        stopped_early = False
        deadline = None if time_budget is None else time.perf_counter() + time_budget

        logger.info(
            "Starting Restore run: tour %d of %d, kappa_bar=%.6g, output_rate=%.6g",
            self._tour_current,
            self.config.n_tours,
            self.config.kappa_bar,
            self.config.output_rate,
        )
        while self._tour_current < self.config.n_tours:
            if deadline is not None and time.perf_counter() >= deadline:
                stopped_early = True
                break
            if should_stop is not None and should_stop():
                stopped_early = True
                break
            self.advance_one_step()
            steps += 1

        summary = RunSummary(
            steps=steps,
            tours_completed=self._tour_current - start_tour,
            outputs_recorded=len(self.trace) - start_outputs,
            candidates_evaluated=self._n_candidates - start_candidates,
            stopped_early=stopped_early,
        )
        if stopped_early:
            logger.info("Restore run stopped early after %d steps", steps)
        logger.info(
            "Restore run finished: %d tours, %d outputs, %d evaluations",
            self._tour_current,
            len(self.trace),
            self._n_evals,
        )
        return summary

    def to_result(self) -> RestoreResult:
        return self.trace.to_result(
            dimension=self.target.dimension,
            dtype=self._dtype,
            device=self._device,
        )
