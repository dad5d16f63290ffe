#!/usr/bin/env python3
"""CLI launcher for Brownian motion Restore sampling of a bivariate Gaussian."""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional
import sys

import matplotlib.pyplot as plt

from bmrestore import RestoreConfig, build_default_config, summarize_trace
from bmrestore.output import write_states, write_trace
from bmrestore.runtime import create_simulation_context, fmt
from bmrestore.ui.interactive import run_interactive_wizard
from bmrestore.visualization import plot_marginals, plot_trace

DEFAULT_CONFIG = build_default_config()
DEFAULT_LONG_NTOURS = 100000
DEFAULT_LONG_OUTPUT_RATE = 1.0


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Sample a correlated bivariate Gaussian with the Brownian motion Restore process.",
    )
    parser.add_argument("--log-c", type=float, default=DEFAULT_CONFIG.log_c, help="Log of the tilting constant C.")
    parser.add_argument(
        "--kappa-bar",
        type=float,
        default=DEFAULT_CONFIG.kappa_bar,
        help="Upper bound on the regeneration rate.",
    )
    parser.add_argument("--ntours", type=int, default=DEFAULT_CONFIG.n_tours, help="Tours in the detailed run.")
    parser.add_argument(
        "--output-rate",
        type=float,
        default=DEFAULT_CONFIG.output_rate,
        help="Rate of the output clock in the detailed run.",
    )
    parser.add_argument(
        "--long-run",
        action="store_true",
        help="Also simulate a long run with a slow output clock.",
    )
    parser.add_argument("--long-ntours", type=int, default=DEFAULT_LONG_NTOURS, help="Tours in the long run.")
    parser.add_argument(
        "--long-output-rate",
        type=float,
        default=DEFAULT_LONG_OUTPUT_RATE,
        help="Rate of the output clock in the long run.",
    )
    parser.add_argument("--seed", type=int, default=None, help="Optional RNG seed.")
    parser.add_argument(
        "--device",
        type=str,
        default="auto",
        help="PyTorch device: auto, cpu, cuda, or explicit device string.",
    )
    parser.add_argument(
        "--precision",
        choices=("float32", "float64"),
        default="float64",
        help="Floating point precision for simulation.",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("."),
        help="Directory for the trace text files.",
    )
    parser.add_argument(
        "--no-trace-files",
        action="store_true",
        help="Skip writing trace text files.",
    )
    parser.add_argument(
        "--save-dir",
        type=Path,
        default=Path("figures"),
        help="Directory where plots are saved (if not disabled).",
    )
    parser.add_argument("--no-save", action="store_true", help="Skip saving plot images to disk.")
    parser.add_argument("--show", action="store_true", help="Display plots interactively after simulation.")
    parser.add_argument("--hist-bins", type=int, default=60, help="Number of bins for marginal histograms.")
    parser.add_argument(
        "--plot-points",
        type=int,
        default=5000,
        help="Maximum number of output records drawn in the trace plot.",
    )
    parser.add_argument(
        "--time-budget",
        type=float,
        default=None,
        help="Optional wall-clock limit in seconds for each run.",
    )
    parser.add_argument(
        "--log-level",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        default="WARNING",
        help="Logging level for the sampler.",
    )
    parser.add_argument(
        "--interactive",
        action="store_true",
        help="Launch a rich interactive CLI wizard to choose sampler options.",
    )
    return parser.parse_args(argv)


def execute_simulation(args: argparse.Namespace, *, suppress_output: bool = False) -> dict:
    messages: list[str] = []
    saved_paths: list[Path] = []
    trace_paths: list[Path] = []

    def log(message: str = "") -> None:
        messages.append(message)
        if not suppress_output:
            print(message)

    context = create_simulation_context(
        device=args.device,
        precision=args.precision,
        seed=args.seed,
        save_dir=args.save_dir,
    )
    config = RestoreConfig(
        log_c=args.log_c,
        kappa_bar=args.kappa_bar,
        n_tours=args.ntours,
        output_rate=args.output_rate,
    )

    engine = context.build_engine(config)
    run_summary = engine.run(time_budget=args.time_budget)
    result = engine.to_result()
    output_dir = Path(args.output_dir).expanduser()

    if not args.no_trace_files:
        trace_paths.extend(write_trace(engine.trace, output_dir, suffix="1"))

    log("Simulation complete")
    log(f"Device: {context.device}")
    log(f"Precision: {args.precision}")
    log(f"log C: {fmt(config.log_c)}")
    log(f"kappa_bar: {fmt(config.kappa_bar)}")
    log(f"Tours: {engine.current_tour} of {config.n_tours}")
    log(f"Output rate: {fmt(config.output_rate)}")
    log(f"Steps: {run_summary.steps}")
    log(f"Outputs: {len(result)}")
    log(f"Target evaluations: {engine.n_evals}")
    log(f"Simulated time: {fmt(engine.current_time)}")
    if run_summary.stopped_early:
        log("Run stopped early: time budget exhausted.")
    if engine.bound_violations:
        log(f"Warning: kappa_bar exceeded at {engine.bound_violations} accepted regenerations.")

    summary = None
    if len(result) > 0 and engine.current_tour > 0:
        summary = summarize_trace(result, engine.current_tour)
        log("")
        log("Mean: " + ", ".join(fmt(v) for v in summary.mean))
        log("Standard error: " + ", ".join(fmt(v) for v in summary.standard_error))
        log("Covariance:")
        for row in summary.covariance:
            log("  " + "  ".join(fmt(v) for v in row))
        log(f"Outputs per tour: {fmt(summary.outputs_per_tour)}")

    long_engine = None
    if args.long_run:
        long_config = RestoreConfig(
            log_c=args.log_c,
            kappa_bar=args.kappa_bar,
            n_tours=args.long_ntours,
            output_rate=args.long_output_rate,
        )
        long_engine = context.build_engine(long_config, seed_offset=1)
        long_summary = long_engine.run(time_budget=args.time_budget)
        log("")
        log("Long run complete")
        log(f"Tours: {long_engine.current_tour} of {long_config.n_tours}")
        log(f"Outputs: {long_summary.outputs_recorded}")
        log(f"Target evaluations: {long_engine.n_evals}")
        if long_summary.stopped_early:
            log("Long run stopped early: time budget exhausted.")
        if not args.no_trace_files:
            long_path = output_dir / "bmrestore_x2.txt"
            write_states(long_engine.trace, long_path)
            trace_paths.append(long_path)

    if trace_paths:
        log("")
        log("Trace files:")
        for path in trace_paths:
            log(f"  {path}")

    figures: list[plt.Figure] = []
    if len(result) > 0 and (not args.no_save or args.show):
        fig_trace, _ = plot_trace(result, max_points=args.plot_points)
        fig_marginals, _ = plot_marginals(result, bins=args.hist_bins)
        figures.extend([fig_trace, fig_marginals])

        if not args.no_save:
            save_dir = context.save_dir
            save_dir.mkdir(parents=True, exist_ok=True)
            path_trace = save_dir / "bmrestore_trace.png"
            path_marginals = save_dir / "bmrestore_marginals.png"
            fig_trace.savefig(path_trace, dpi=150, bbox_inches="tight")
            fig_marginals.savefig(path_marginals, dpi=150, bbox_inches="tight")
            saved_paths.extend([path_trace, path_marginals])
            log("")
            log("Saved:")
            log(f"  {path_trace}")
            log(f"  {path_marginals}")

    if args.show:
        plt.show()
    else:
        for fig in figures:
            plt.close(fig)

    return {
        "config": config,
        "engine": engine,
        "long_engine": long_engine,
        "result": result,
        "summary": summary,
        "messages": messages,
        "trace_paths": trace_paths,
        "saved_paths": saved_paths,
    }


def main(argv: Optional[list[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")

    auto_interactive = argv is None and len(sys.argv) == 1 and sys.stdin.isatty() and sys.stdout.isatty()
    if args.interactive or auto_interactive:
        args = run_interactive_wizard(args)

    execute_simulation(args)


if __name__ == "__main__":
    main()
