#!/usr/bin/env python
"""
Fit a rating scale model to response data and save the fitted model.
"""

from pathlib import Path

import numpy as np
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ratingscale.core.data import load_responses_csv
from ratingscale.irt import ModelKind, RatingScaleEstimator
from ratingscale.irt.diagnostics import (
    compute_category_comparison,
    compute_item_fit,
)
from ratingscale.irt.estimation import EstimationResult, estimate_abilities

PROJECT_DIR = Path(__file__).parent.parent.absolute()
DEFAULT_OUTPUT_DIR = PROJECT_DIR / "data" / "fitted-models"

console = Console(force_terminal=True, legacy_windows=True)
app = typer.Typer()


def save_model(model: EstimationResult, output_path: Path) -> None:
    """Save fitted model to json file."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        f.write(model.model_dump_json(indent=4))


@app.command()
def main(
    input_path: Path = typer.Argument(
        ...,
        help="Path to CSV file with ratings (columns: person, item, response)",
    ),
    covariates_path: Path | None = typer.Option(
        None,
        "-c",
        "--covariates",
        help="CSV with a person column and covariate columns (intercept first)",
    ),
    model_kind: ModelKind = typer.Option(
        ModelKind.RSM,
        "-m",
        "--model",
        help="Model to fit",
    ),
    n_categories: int | None = typer.Option(
        None,
        "-k",
        "--n-categories",
        help="Number of response categories (default: largest response + 1)",
    ),
    output_dir: Path = typer.Option(
        DEFAULT_OUTPUT_DIR,
        "-o",
        "--output-dir",
        help="Output directory for fitted model",
    ),
) -> None:
    """Fit a rating scale model to ratings and save as JSON."""

    # Validate input
    for path in (input_path, covariates_path):
        if path is None:
            continue
        if not path.exists():
            console.print(f"[red]File not found: {path}[/red]")
            raise typer.Exit(1)
        if path.suffix != ".csv":
            console.print("[red]Only .csv files are supported[/red]")
            raise typer.Exit(1)

    # Load data
    console.print("[dim]Loading data...[/dim]")
    try:
        _, item_labels, data = load_responses_csv(
            input_path, covariates_path, n_categories
        )
    except ValueError as e:
        console.print(f"[red]Error loading CSV: {e}[/red]")
        raise typer.Exit(1) from e

    console.print(
        Panel(
            f"[bold]Fit {model_kind.value.upper()}[/bold]\n\n"
            f"Input: [cyan]{input_path}[/cyan]\n"
            f"Persons: [cyan]{data.n_persons}[/cyan]\n"
            f"Items: [cyan]{data.n_items}[/cyan]\n"
            f"Categories: [cyan]{data.n_categories}[/cyan]\n"
            f"Covariates: [cyan]{data.n_covariates}[/cyan]",
            title="Configuration",
        )
    )

    # Fit model
    console.print("[dim]Fitting model...[/dim]")
    try:
        model = RatingScaleEstimator(model_kind).fit(data)
    except ValueError as e:
        console.print(f"[red]Estimation failed: {e}[/red]")
        raise typer.Exit(1) from e

    console.print(
        f"  {model.convergence_status.value} "
        f"({model.n_iterations} iterations, LL={model.log_likelihood:.2f})"
    )
    console.print(f"  AIC = {model.aic:.2f}, BIC = {model.bic:.2f}")

    # Run diagnostics
    console.print("[dim]Running diagnostics...[/dim]")
    abilities = estimate_abilities(data, model.parameters)
    comparison = compute_category_comparison(
        data, model.parameters, abilities.eap
    )
    max_abs_diff = float(np.max(np.abs(comparison.difference)))
    console.print(f"  Max |empirical - model| category share = {max_abs_diff:.4f}")

    fit = compute_item_fit(data, model.parameters, abilities.eap)
    table = Table(title="Item fit")
    table.add_column("Item")
    table.add_column("Difficulty", justify="right")
    table.add_column("Discrimination", justify="right")
    table.add_column("Infit", justify="right")
    table.add_column("Outfit", justify="right")
    alphas = model.parameters.item_discriminations()
    for i, label in enumerate(item_labels):
        table.add_row(
            label,
            f"{model.parameters.difficulties[i]:.3f}",
            f"{alphas[i]:.3f}",
            f"{fit.infit[i]:.3f}",
            f"{fit.outfit[i]:.3f}",
        )
    console.print(table)

    # Save model
    output_path = output_dir / f"{input_path.stem}_{model_kind.value}.json"
    save_model(model, output_path)

    console.print(
        Panel(
            f"[bold green]Model saved[/bold green]\n\n"
            f"Output: [cyan]{output_path}[/cyan]",
            title="Done",
        )
    )


if __name__ == "__main__":
    app()
