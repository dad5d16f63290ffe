from __future__ import annotations

import argparse

from bmrestore.output import read_states, read_tours

import bmrestore_simulation


def _namespace(tmp_path, **overrides) -> argparse.Namespace:
    args = bmrestore_simulation.parse_args(
        [
            "--ntours", "5",
            "--output-rate", "100",
            "--seed", "3",
            "--device", "cpu",
            "--output-dir", str(tmp_path / "traces"),
            "--save-dir", str(tmp_path / "figures"),
        ]
    )
    for key, value in overrides.items():
        setattr(args, key, value)
    return args


def test_parse_args_defaults() -> None:
    args = bmrestore_simulation.parse_args([])
    assert args.log_c == 2.07
    assert args.kappa_bar == 100.0
    assert args.ntours == 100
    assert args.output_rate == 1000.0
    assert args.long_ntours == 100000
    assert args.long_output_rate == 1.0
    assert not args.long_run


def test_execute_simulation_writes_traces_and_plots(tmp_path) -> None:
    args = _namespace(tmp_path, long_run=True, long_ntours=3)
    outcome = bmrestore_simulation.execute_simulation(args, suppress_output=True)

    engine = outcome["engine"]
    assert engine.current_tour == 5
    assert outcome["long_engine"].current_tour == 3
    assert "Simulation complete" in outcome["messages"]

    names = sorted(path.name for path in outcome["trace_paths"])
    assert names == ["bmrestore_tours1.txt", "bmrestore_ts1.txt", "bmrestore_x1.txt", "bmrestore_x2.txt"]
    states = read_states(tmp_path / "traces" / "bmrestore_x1.txt", dimension=2)
    tours = read_tours(tmp_path / "traces" / "bmrestore_tours1.txt")
    assert states.shape[0] == len(engine.trace) == tours.shape[0]

    assert all(path.exists() for path in outcome["saved_paths"])
    assert len(outcome["saved_paths"]) == 2


def test_execute_simulation_without_files(tmp_path) -> None:
    args = _namespace(tmp_path, no_trace_files=True, no_save=True)
    outcome = bmrestore_simulation.execute_simulation(args, suppress_output=True)

    assert outcome["trace_paths"] == []
    assert outcome["saved_paths"] == []
    assert not (tmp_path / "traces").exists()
    assert outcome["summary"] is not None


def test_time_budget_is_reported_for_both_runs(tmp_path) -> None:
    args = _namespace(tmp_path, long_run=True, long_ntours=3, time_budget=1e-9, no_save=True)
    outcome = bmrestore_simulation.execute_simulation(args, suppress_output=True)

    assert outcome["engine"].current_tour < 5
    assert outcome["long_engine"].current_tour < 3
    assert "Run stopped early: time budget exhausted." in outcome["messages"]
    assert "Long run stopped early: time budget exhausted." in outcome["messages"]
