"""Result containers for Restore simulations."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import torch

OUTPUT = "output"
REJECTED = "rejected"
REGENERATION = "regeneration"


@dataclass
class RestoreResult:
    times: torch.Tensor
    states: torch.Tensor
    tours: torch.Tensor

    def __len__(self) -> int:
        return self.times.shape[0]


@dataclass
class RestoreEvent:
    """Outcome of a single step of the competing clocks."""

    kind: str
    time: float
    tour: int
    rate: Optional[float] = None


@dataclass
class RunSummary:
    steps: int
    tours_completed: int
    outputs_recorded: int
    candidates_evaluated: int
    stopped_early: bool = False


@dataclass
class RestoreTrace:
    """Append-only record of output times, states and tour indices."""

    times: list[float] = field(default_factory=list)
    states: list[torch.Tensor] = field(default_factory=list)
    tours: list[int] = field(default_factory=list)

    def append(self, time: float, state: torch.Tensor, tour: int) -> None:
        self.times.append(time)
        self.states.append(state.clone())
        self.tours.append(tour)

    def __len__(self) -> int:
        return len(self.times)

    def to_result(self, *, dimension: int, dtype: torch.dtype, device: torch.device) -> RestoreResult:
        if self.states:
            states = torch.stack(self.states, dim=0)
        else:
            states = torch.empty((0, dimension), dtype=dtype, device=device)
        return RestoreResult(
            times=torch.tensor(self.times, dtype=torch.float64, device=device),
            states=states,
            tours=torch.tensor(self.tours, dtype=torch.long, device=device),
        )
