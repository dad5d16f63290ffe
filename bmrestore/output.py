"""Plain-text serialisation of Restore traces.

One record per line. Times and tour numbers hold a single value; state lines
hold the coordinates, each followed by a space. Floats use ``%g`` so the files
match what downstream analysis scripts already read.
"""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, Sequence, TextIO, Union

import numpy as np
import torch

from .errors import TraceWriteError
from .results import RestoreTrace

Destination = Union[str, Path, TextIO]


def _fmt(value: float) -> str:
    return f"{value:g}"


def format_times(times: Iterable[float]) -> str:
    return "".join(f"{_fmt(t)}\n" for t in times)


def format_tours(tours: Iterable[int]) -> str:
    return "".join(f"{int(k)}\n" for k in tours)


def format_states(states: Iterable[torch.Tensor] | torch.Tensor) -> str:
    lines = []
    for row in states:
        lines.append("".join(f"{_fmt(x)} " for x in row.tolist()) + "\n")
    return "".join(lines)


def _write(text: str, destination: Destination, *, overwrite: bool) -> None:
    if isinstance(destination, (str, Path)):
        path = Path(destination).expanduser()
        if path.exists() and not overwrite:
            raise TraceWriteError(f"{path} already exists.")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text)
        except OSError as exc:
            raise TraceWriteError(f"Failed to write {path} ({exc}).") from exc
        return
    if getattr(destination, "closed", False):
        raise TraceWriteError("Destination stream is closed.")
    destination.write(text)


def write_times(trace: RestoreTrace, destination: Destination, *, overwrite: bool = True) -> None:
    _write(format_times(trace.times), destination, overwrite=overwrite)


def write_states(trace: RestoreTrace, destination: Destination, *, overwrite: bool = True) -> None:
    _write(format_states(trace.states), destination, overwrite=overwrite)


def write_tours(trace: RestoreTrace, destination: Destination, *, overwrite: bool = True) -> None:
    _write(format_tours(trace.tours), destination, overwrite=overwrite)


def write_trace(
    trace: RestoreTrace,
    directory: str | Path,
    *,
    prefix: str = "bmrestore",
    suffix: str = "",
    overwrite: bool = True,
) -> list[Path]:
    """Write states, times and tours as ``{prefix}_x{suffix}.txt`` etc."""
    directory = Path(directory).expanduser()
    targets = [
        (write_states, directory / f"{prefix}_x{suffix}.txt"),
        (write_times, directory / f"{prefix}_ts{suffix}.txt"),
        (write_tours, directory / f"{prefix}_tours{suffix}.txt"),
    ]
    for writer, path in targets:
        writer(trace, path, overwrite=overwrite)
    return [path for _, path in targets]


def read_times(source: str | Path | TextIO) -> np.ndarray:
    return np.loadtxt(source, dtype=float, ndmin=1)


def read_tours(source: str | Path | TextIO) -> np.ndarray:
    return np.loadtxt(source, dtype=np.int64, ndmin=1)


def read_states(source: str | Path | TextIO, *, dimension: int | None = None) -> np.ndarray:
    states = np.loadtxt(source, dtype=float, ndmin=2)
    if dimension is not None and states.size and states.shape[1] != dimension:
        raise ValueError(f"Expected {dimension} coordinates per line, got {states.shape[1]}.")
    return states


def trace_from_arrays(times: Sequence[float], states: np.ndarray, tours: Sequence[int]) -> RestoreTrace:
    """Rebuild an in-memory trace from parsed text files."""
    if not (len(times) == len(states) == len(tours)):
        raise ValueError("Times, states and tours must have the same length.")
    return RestoreTrace(
        times=[float(t) for t in times],
        states=[torch.as_tensor(row, dtype=torch.float64) for row in states],
        tours=[int(k) for k in tours],
    )
