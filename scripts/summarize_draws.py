#!/usr/bin/env python
"""
Summarise posterior draws produced by an external sampling engine.

Reads an .npz archive with one array of shape (chain, draw, ...) per
parameter, writes a summary CSV (mean, sd, 95% interval, R-hat) and one
interval plot per parameter. Optionally joins generating values for a
recovery check.
"""

import json
import logging
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import typer
from rich.console import Console
from rich.table import Table

from ratingscale.irt.parameters import RatingScaleParameters
from ratingscale.reporting.plotting import (
    plot_intervals,
    plot_parameter_recovery,
)
from ratingscale.reporting.summary import (
    RHAT_THRESHOLD,
    flag_unconverged,
    parameter_values,
    recovery_table,
    summarize_draws,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("summarize_draws")

console = Console(force_terminal=True, legacy_windows=True)
app = typer.Typer()


@app.command()
def main(
    draws_path: Path = typer.Argument(
        ..., help="Path to .npz file with arrays of shape (chain, draw, ...)"
    ),
    output_dir: Path = typer.Option(
        Path("summaries"), "-o", "--output-dir", help="Output directory"
    ),
    true_parameters: Path | None = typer.Option(
        None,
        "-t",
        "--true-parameters",
        help="JSON of generating parameters (as written by simulate_data.py)",
    ),
    threshold: float = typer.Option(
        RHAT_THRESHOLD, "--rhat-threshold", help="R-hat flag threshold"
    ),
) -> None:
    """Summarise external posterior draws."""
    if not draws_path.exists():
        console.print(f"[red]File not found: {draws_path}[/red]")
        raise typer.Exit(1)

    with np.load(draws_path) as archive:
        draws = {name: archive[name] for name in archive.files}

    try:
        summary = summarize_draws(draws)
    except ValueError as e:
        console.print(f"[red]Invalid draws: {e}[/red]")
        raise typer.Exit(1) from e

    output_dir.mkdir(parents=True, exist_ok=True)
    summary_path = output_dir / f"{draws_path.stem}_summary.csv"
    summary.to_csv(summary_path)
    logger.info("Wrote %d rows to %s", len(summary), summary_path)

    flagged = flag_unconverged(summary, threshold)
    table = Table(title=f"Parameters with R-hat >= {threshold}")
    table.add_column("Parameter")
    table.add_column("R-hat", justify="right")
    for name, row in flagged.iterrows():
        table.add_row(str(name), f"{row['r_hat']:.3f}")
    if len(flagged) > 0:
        console.print(table)
    else:
        console.print("[green]All parameters below the R-hat threshold[/green]")

    for name in draws:
        fig = plot_intervals(summary, name)
        fig.savefig(output_dir / f"{draws_path.stem}_{name}.png")
        plt.close(fig)

    if true_parameters is not None:
        params = RatingScaleParameters.model_validate(
            json.loads(true_parameters.read_text())
        )
        recovery = recovery_table(summary, parameter_values(params))
        recovery.to_csv(output_dir / f"{draws_path.stem}_recovery.csv")
        fig = plot_parameter_recovery(recovery)
        fig.savefig(output_dir / f"{draws_path.stem}_recovery.png")
        plt.close(fig)
        if "covered" in recovery.columns:
            console.print(
                f"Interval coverage: {recovery['covered'].mean():.1%} "
                f"of {len(recovery)} parameters"
            )


if __name__ == "__main__":
    app()
