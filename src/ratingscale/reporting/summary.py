"""
Posterior summaries of externally produced draws.

Draws are given per parameter as arrays of shape (chain, draw, ...). Vector
parameters are expanded to one row per element, named the way Stan-style
engines name them (1-based, e.g. "beta[3]").
"""

import logging
from collections.abc import Mapping

import arviz as az
import numpy as np
import pandas as pd
from numpy.typing import ArrayLike, NDArray

from ratingscale.irt.parameters import ModelKind, RatingScaleParameters

logger = logging.getLogger(__name__)

RHAT_THRESHOLD = 1.1
MIN_DRAWS_FOR_RHAT = 4

SUMMARY_COLUMNS = ["mean", "sd", "lower", "upper", "r_hat"]


def _element_names(name: str, shape: tuple[int, ...]) -> list[str]:
    if not shape:
        return [name]
    return [
        f"{name}[{','.join(str(i + 1) for i in idx)}]"
        for idx in np.ndindex(*shape)
    ]


def _rhat(chains: NDArray[np.float64]) -> float:
    """Split R-hat of one scalar parameter, draws shaped (chain, draw)."""
    if chains.shape[1] < MIN_DRAWS_FOR_RHAT:
        return float("nan")
    return float(az.rhat(chains))


def summarize_draws(
    draws: Mapping[str, ArrayLike], interval: float = 0.95
) -> pd.DataFrame:
    """Summarise posterior draws per scalar parameter.

    Args:
        draws: Parameter name -> array of shape (chain, draw, ...).
        interval: Central interval probability.

    Returns:
        DataFrame indexed by parameter name with columns mean, sd, lower,
        upper and r_hat.

    Raises:
        ValueError: If an array has fewer than two dimensions or the interval
            is outside (0, 1).
    """
    if not 0 < interval < 1:
        raise ValueError(f"interval must be in (0, 1), got {interval}")
    tail = (1 - interval) / 2

    rows: dict[str, list[float]] = {}
    for name, values in draws.items():
        arr = np.asarray(values, dtype=np.float64)
        if arr.ndim < 2:
            raise ValueError(
                f"Draws for {name} must have shape (chain, draw, ...), "
                f"got {arr.shape}"
            )
        n_chains, n_draws = arr.shape[:2]
        flat = arr.reshape(n_chains, n_draws, -1)
        labels = _element_names(name, arr.shape[2:])
        for k, label in enumerate(labels):
            chains = flat[:, :, k]
            pooled = chains.ravel()
            rows[label] = [
                float(np.mean(pooled)),
                float(np.std(pooled, ddof=1)) if pooled.size > 1 else 0.0,
                float(np.quantile(pooled, tail)),
                float(np.quantile(pooled, 1 - tail)),
                _rhat(chains),
            ]

    summary = pd.DataFrame.from_dict(
        rows, orient="index", columns=SUMMARY_COLUMNS
    )
    summary.index.name = "parameter"
    return summary


def flag_unconverged(
    summary: pd.DataFrame, threshold: float = RHAT_THRESHOLD
) -> pd.DataFrame:
    """Rows whose R-hat is at or above threshold, or undefined."""
    mask = ~(summary["r_hat"] < threshold)
    flagged = summary[mask]
    if len(flagged) > 0:
        logger.warning(
            f"{len(flagged)} of {len(summary)} parameters have "
            f"R-hat >= {threshold} or no R-hat"
        )
    return flagged


def parameter_values(params: RatingScaleParameters) -> dict[str, float]:
    """Flatten parameters to Stan-style names.

    beta[i], kappa[s] and lambda[k] always; sigma for the RSM, alpha[i]
    for the GRSM.
    """
    values: dict[str, float] = {}
    for prefix, seq in (
        ("beta", params.difficulties),
        ("kappa", params.steps),
        ("lambda", params.regression),
    ):
        for i, v in enumerate(seq):
            values[f"{prefix}[{i + 1}]"] = float(v)
    if params.model == ModelKind.RSM:
        values["sigma"] = float(params.sigma)
    else:
        for i, a in enumerate(params.item_discriminations()):
            values[f"alpha[{i + 1}]"] = float(a)
    return values


def recovery_table(
    summary: pd.DataFrame, true_values: Mapping[str, float]
) -> pd.DataFrame:
    """Join generating values to a posterior (or point) summary.

    Args:
        summary: Output of summarize_draws, or any frame indexed by
            parameter name with a mean column (lower/upper optional).
        true_values: Parameter name -> generating value.

    Returns:
        DataFrame with columns true, mean, error and, when intervals are
        available, lower, upper and covered. Only parameters present in
        both inputs are kept.
    """
    truth = pd.Series(dict(true_values), name="true", dtype=np.float64)
    table = summary.join(truth, how="inner")
    result = pd.DataFrame(
        {"true": table["true"], "mean": table["mean"]}, index=table.index
    )
    result["error"] = result["mean"] - result["true"]
    if "lower" in table.columns and "upper" in table.columns:
        result["lower"] = table["lower"]
        result["upper"] = table["upper"]
        result["covered"] = (table["lower"] <= table["true"]) & (
            table["true"] <= table["upper"]
        )
    return result


def point_summary(params: RatingScaleParameters) -> pd.DataFrame:
    """Summary-shaped frame (mean column only) for point estimates."""
    values = parameter_values(params)
    summary = pd.DataFrame(
        {"mean": pd.Series(values, dtype=np.float64)}
    )
    summary.index.name = "parameter"
    return summary
