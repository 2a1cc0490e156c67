"""
Plotting utilities for fitted rating scale models and posterior summaries.
"""

import numpy as np
import pandas as pd
from matplotlib.figure import Figure
from numpy.typing import ArrayLike

from ratingscale.irt.parameters import RatingScaleParameters


def plot_category_curves(
    params: RatingScaleParameters,
    item: int,
    locations: ArrayLike | None = None,
) -> Figure:
    """
    Plot category response curves of one item.

    Args:
        params: Model parameters.
        item: Item index.
        locations: Location grid. Defaults to 201 points on [-4, 4].

    Returns:
        matplotlib Figure with one curve per category.
    """
    import matplotlib.pyplot as plt

    if locations is None:
        grid = np.linspace(-4.0, 4.0, 201)
    else:
        grid = np.asarray(locations, dtype=np.float64)
    probs = params.item_probabilities(item, grid)

    fig, ax = plt.subplots(figsize=(8, 5))
    for k in range(params.n_categories):
        ax.plot(grid, probs[:, k], label=f"{k}")

    ax.set_xlabel("Location")
    ax.set_ylabel("P(category)")
    ax.set_ylim(0.0, 1.0)
    ax.set_title(f"Category probabilities, item {item + 1}")
    ax.legend(title="Category")
    fig.tight_layout()
    return fig


def plot_parameter_recovery(table: pd.DataFrame) -> Figure:
    """
    Scatter estimated against generating values.

    Args:
        table: Output of recovery_table. Interval columns, when present,
            are drawn as error bars.

    Returns:
        matplotlib Figure with the identity line for reference.
    """
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(figsize=(6, 6))
    truth = table["true"].to_numpy(dtype=np.float64)
    est = table["mean"].to_numpy(dtype=np.float64)

    if "lower" in table.columns and "upper" in table.columns:
        yerr = np.vstack(
            [
                est - table["lower"].to_numpy(dtype=np.float64),
                table["upper"].to_numpy(dtype=np.float64) - est,
            ]
        )
        ax.errorbar(truth, est, yerr=yerr, fmt="o", alpha=0.7)
    else:
        ax.scatter(truth, est, alpha=0.7)

    lo = float(min(truth.min(), est.min()))
    hi = float(max(truth.max(), est.max()))
    ax.plot([lo, hi], [lo, hi], color="grey", linestyle="--", linewidth=1)

    ax.set_xlabel("Generating value")
    ax.set_ylabel("Estimate")
    ax.set_title("Parameter recovery")
    fig.tight_layout()
    return fig


def plot_intervals(summary: pd.DataFrame, parameter: str) -> Figure:
    """
    Posterior means with interval bars for one (vector) parameter.

    Args:
        summary: Output of summarize_draws.
        parameter: Base name, e.g. "beta" selects beta[1], beta[2], ...

    Returns:
        matplotlib Figure, one row per element.

    Raises:
        ValueError: If no rows match the parameter name.
    """
    import matplotlib.pyplot as plt

    names = summary.index.to_series()
    mask = (names == parameter) | names.str.startswith(f"{parameter}[")
    rows = summary[mask.to_numpy()]
    if len(rows) == 0:
        raise ValueError(f"No rows for parameter {parameter}")

    positions = np.arange(len(rows))
    means = rows["mean"].to_numpy(dtype=np.float64)

    fig, ax = plt.subplots(figsize=(7, max(2.0, 0.35 * len(rows) + 1.0)))
    ax.hlines(
        positions,
        rows["lower"].to_numpy(dtype=np.float64),
        rows["upper"].to_numpy(dtype=np.float64),
        color="tab:blue",
    )
    ax.plot(means, positions, "o", color="tab:blue")
    ax.set_yticks(positions)
    ax.set_yticklabels(list(rows.index))
    ax.invert_yaxis()
    ax.set_xlabel("Value")
    ax.set_title(parameter)
    fig.tight_layout()
    return fig
