"""
Starting value computation for rating scale estimation.

This module provides data-driven initialization of difficulties, steps and
the regression intercept from smoothed category proportions.
"""

import numpy as np
from numpy.typing import NDArray

from ratingscale.core.data_models import ResponseData
from ratingscale.irt.parameters import ModelKind, RatingScaleParameters


def compute_category_proportions(
    data: ResponseData,
    add_constant: float = 0.5,
) -> NDArray[np.float64]:
    """
    Pooled category proportions across all items with additive smoothing.

    Args:
        data: Response data.
        add_constant: Additive smoothing constant (Laplace smoothing).

    Returns:
        Array of shape (n_categories,) with smoothed proportions.
    """
    counts = np.bincount(data.responses, minlength=data.n_categories)
    smoothed: NDArray[np.float64] = (counts + add_constant) / (
        counts.sum() + add_constant * data.n_categories
    )
    return smoothed


def compute_item_mean_scores(
    data: ResponseData,
    add_constant: float = 0.5,
) -> NDArray[np.float64]:
    """
    Smoothed mean score of each item as a fraction of the maximum score.

    Returns:
        Array of shape (n_items,) with values strictly inside (0, 1).
    """
    n_items = data.n_items
    n_obs = np.bincount(data.items, minlength=n_items).astype(np.float64)
    totals = np.bincount(data.items, weights=data.responses, minlength=n_items)
    m = data.max_category
    fractions: NDArray[np.float64] = (totals + add_constant) / (
        n_obs * m + 2 * add_constant
    )
    return fractions


def _logit(p: NDArray[np.float64] | float) -> NDArray[np.float64]:
    p_arr = np.clip(np.asarray(p, dtype=np.float64), 1e-6, 1 - 1e-6)
    result: NDArray[np.float64] = np.log(p_arr / (1 - p_arr))
    return result


def compute_starting_values(
    data: ResponseData, model: ModelKind
) -> RatingScaleParameters:
    """
    Initial parameters for EM.

    - Steps: adjacent-category log-odds log(p_{k-1} / p_k) of the pooled
      proportions, centred to sum to zero.
    - Difficulties: negative logit of each item's mean score fraction,
      centred to sum to zero.
    - Regression: logit of the overall mean score fraction for an all-ones
      first column, zero elsewhere.
    - Unit σ and unit discriminations.

    Args:
        data: Response data.
        model: RSM or GRSM.

    Returns:
        RatingScaleParameters satisfying all constraints.
    """
    props = compute_category_proportions(data)
    log_props = np.log(props)
    steps = log_props[:-1] - log_props[1:]
    steps = steps - steps.mean()

    item_fraction = compute_item_mean_scores(data)
    difficulties = -_logit(item_fraction)
    difficulties = difficulties - difficulties.mean()

    regression = np.zeros(data.n_covariates, dtype=np.float64)
    design = data.design
    if np.allclose(design[:, 0], 1.0):
        overall = float(data.responses.mean()) / data.max_category
        regression[0] = float(_logit(overall))

    discriminations = (
        tuple(1.0 for _ in range(data.n_items))
        if model == ModelKind.GRSM
        else None
    )

    return RatingScaleParameters(
        difficulties=tuple(float(b) for b in difficulties),
        steps=tuple(float(k) for k in steps),
        regression=tuple(float(x) for x in regression),
        sigma=1.0,
        discriminations=discriminations,
    )
