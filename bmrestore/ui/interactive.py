"""Rich-powered interactive wizard for configuring Restore runs."""
from __future__ import annotations

import argparse
import math
from pathlib import Path
from typing import Iterable, Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table
from rich.theme import Theme

_THEME = Theme(
    {
        "accent": "bright_cyan",
        "muted": "grey70",
        "warning": "gold1",
        "success": "spring_green2",
    }
)

_console = Console(theme=_THEME)


def _prompt_int(message: str, default: int, *, minimum: Optional[int] = None) -> int:
    while True:
        response = Prompt.ask(message, default=str(default), console=_console)
        try:
            value = int(response)
        except ValueError:
            _console.print("[warning]Please enter a whole number.[/warning]")
            continue
        if minimum is not None and value < minimum:
            _console.print(f"[warning]Value must be at least {minimum}.[/warning]")
            continue
        return value


def _prompt_float(
    message: str,
    default: float,
    *,
    minimum: Optional[float] = None,
    exclusive: bool = False,
) -> float:
    while True:
        response = Prompt.ask(message, default=f"{default}", console=_console)
        try:
            value = float(response)
        except ValueError:
            _console.print("[warning]Please enter a numeric value.[/warning]")
            continue
        if not math.isfinite(value):
            _console.print("[warning]Please enter a finite value.[/warning]")
            continue
        if minimum is not None and (value < minimum or (exclusive and value == minimum)):
            bound = "greater than" if exclusive else "at least"
            _console.print(f"[warning]Value must be {bound} {minimum}.[/warning]")
            continue
        return value


def _prompt_optional_int(message: str, default: Optional[int]) -> Optional[int]:
    default_label = "none" if default is None else str(default)
    response = Prompt.ask(message, default=default_label, console=_console)
    if response.strip().lower() in {"", "none", "null"}:
        return None
    try:
        return int(response)
    except ValueError:
        _console.print("[warning]Invalid integer; falling back to default.[/warning]")
        return default


def _prompt_choice(message: str, choices: Iterable[str], default: str) -> str:
    return Prompt.ask(
        message,
        choices=list(choices),
        default=default,
        console=_console,
        show_choices=True,
    )


def _summarise_configuration(data: dict[str, str]) -> None:
    table = Table(title="Configuration Summary", show_lines=False, expand=True)
    table.add_column("Setting", style="accent", no_wrap=True)
    table.add_column("Value", style="muted")
    for key, value in data.items():
        table.add_row(key, value)
    _console.print(table)


def run_interactive_wizard(args: argparse.Namespace) -> argparse.Namespace:
    _console.print(Panel.fit("[accent bold]BM Restore Configurator[/accent bold]", border_style="accent"))
    _console.print(
        "Use the prompts below to tailor the sampler. Press [accent]<enter>[/accent] to accept defaults.",
        style="muted",
    )

    log_c = _prompt_float("log C (tilting constant)", args.log_c)
    kappa_bar = _prompt_float("kappa_bar (rate upper bound)", args.kappa_bar, minimum=0.0, exclusive=True)
    ntours = _prompt_int("Tours for the detailed run", args.ntours, minimum=0)
    output_rate = _prompt_float("Output rate for the detailed run", args.output_rate, minimum=0.0, exclusive=True)

    long_run = Confirm.ask("Also simulate a long, sparsely recorded run?", default=args.long_run, console=_console)
    long_ntours = args.long_ntours
    long_output_rate = args.long_output_rate
    if long_run:
        long_ntours = _prompt_int("Tours for the long run", args.long_ntours, minimum=0)
        long_output_rate = _prompt_float(
            "Output rate for the long run",
            args.long_output_rate,
            minimum=0.0,
            exclusive=True,
        )

    seed = _prompt_optional_int("Random seed (or 'none')", args.seed)
    device = _prompt_choice("Computation device", ["auto", "cpu", "cuda"], args.device)
    precision = _prompt_choice("Floating point precision", ["float64", "float32"], args.precision)

    output_dir = Path(
        Prompt.ask("Directory for trace text files", default=str(args.output_dir), console=_console)
    ).expanduser()

    show = Confirm.ask("Show plots window?", default=args.show, console=_console)
    save_plots = Confirm.ask("Save plots to disk?", default=not args.no_save, console=_console)
    if save_plots:
        save_dir = Path(Prompt.ask("Directory for saved plots", default=str(args.save_dir), console=_console)).expanduser()
        no_save = False
    else:
        save_dir = args.save_dir
        no_save = True

    hist_bins = _prompt_int("Histogram bins", args.hist_bins, minimum=1)

    summary_data = {
        "log C": f"{log_c}",
        "kappa_bar": f"{kappa_bar}",
        "Tours": f"{ntours}",
        "Output rate": f"{output_rate}",
        "Long run": f"{long_ntours} tours @ {long_output_rate}" if long_run else "No",
        "Device": device,
        "Precision": precision,
        "Trace directory": str(output_dir),
        "Show window": "Yes" if show else "No",
        "Save plots": "Yes" if not no_save else "No",
    }
    _summarise_configuration(summary_data)

    return argparse.Namespace(
        log_c=log_c,
        kappa_bar=kappa_bar,
        ntours=ntours,
        output_rate=output_rate,
        long_run=long_run,
        long_ntours=long_ntours,
        long_output_rate=long_output_rate,
        seed=seed,
        device=device,
        precision=precision,
        output_dir=output_dir,
        no_trace_files=args.no_trace_files,
        save_dir=save_dir,
        no_save=no_save,
        show=show,
        hist_bins=hist_bins,
        plot_points=args.plot_points,
        time_budget=args.time_budget,
        log_level=args.log_level,
        interactive=False,
    )
