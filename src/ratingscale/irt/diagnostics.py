"""
Diagnostic utilities for rating scale model validation.

Provides functions to compare empirical category proportions against
model-implied probabilities, and Rasch-style infit/outfit statistics.
"""

from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ratingscale.core.data_models import ResponseData
from ratingscale.irt.likelihood import check_compatible
from ratingscale.irt.parameters import RatingScaleParameters
from ratingscale.irt.probabilities import (
    category_probabilities_batch,
    expected_score,
)


@dataclass
class CategoryComparison:
    """Comparison of empirical vs model category proportions per item."""

    item_id: NDArray[np.int64]
    category: NDArray[np.int64]
    empirical_prob: NDArray[np.float64]
    model_prob: NDArray[np.float64]
    difference: NDArray[np.float64]


@dataclass
class ItemFit:
    """
    Mean-square fit statistics per item.

    Values near 1 indicate fit; above 1 noise, below 1 overfit.
    """

    item_id: NDArray[np.int64]
    n_observations: NDArray[np.int64]
    infit: NDArray[np.float64]
    outfit: NDArray[np.float64]


def _observation_probabilities(
    data: ResponseData,
    params: RatingScaleParameters,
    abilities: ArrayLike,
) -> NDArray[np.float64]:
    """Category probabilities for every observation, shape (N, m+1)."""
    theta = np.asarray(abilities, dtype=np.float64)
    if theta.shape != (data.n_persons,):
        raise ValueError(
            f"Expected {data.n_persons} abilities, got shape {theta.shape}"
        )
    check_compatible(data, params)
    locations = params.locations(theta, data.design)
    difficulties = np.array(params.difficulties, dtype=np.float64)
    alphas = params.item_discriminations()
    return category_probabilities_batch(
        locations[data.persons],
        difficulties[data.items],
        params.steps,
        alphas[data.items],
    )


def compute_category_comparison(
    data: ResponseData,
    params: RatingScaleParameters,
    abilities: ArrayLike,
) -> CategoryComparison:
    """Compare empirical vs model category proportions.

    The model proportion of a category is the average of P(category | L)
    over the persons who answered the item.

    Args:
        data: Observed ratings.
        params: Fitted parameters.
        abilities: Estimated ability per person.

    Returns:
        CategoryComparison with one row per (item, category).
    """
    probs = _observation_probabilities(data, params, abilities)
    n_categories = data.n_categories

    item_ids: list[int] = []
    categories: list[int] = []
    empirical_probs: list[float] = []
    model_probs: list[float] = []

    for item_idx in range(data.n_items):
        mask = data.items == item_idx
        n_obs = int(mask.sum())
        if n_obs == 0:
            continue
        counts = data.item_category_counts(item_idx)
        model_mean = probs[mask].mean(axis=0)
        for cat in range(n_categories):
            item_ids.append(item_idx)
            categories.append(cat)
            empirical_probs.append(counts[cat] / n_obs)
            model_probs.append(float(model_mean[cat]))

    empirical_arr = np.array(empirical_probs, dtype=np.float64)
    model_arr = np.array(model_probs, dtype=np.float64)

    return CategoryComparison(
        item_id=np.array(item_ids, dtype=np.int64),
        category=np.array(categories, dtype=np.int64),
        empirical_prob=empirical_arr,
        model_prob=model_arr,
        difference=empirical_arr - model_arr,
    )


def compute_item_fit(
    data: ResponseData,
    params: RatingScaleParameters,
    abilities: ArrayLike,
) -> ItemFit:
    """Infit and outfit mean-square statistics per item.

    With expected score E = Σ k P_k and variance V = Σ (k - E)² P_k:
        outfit = mean over persons of (y - E)² / V
        infit  = Σ (y - E)² / Σ V

    Args:
        data: Observed ratings.
        params: Fitted parameters.
        abilities: Estimated ability per person.

    Returns:
        ItemFit with one entry per item. Items without observations get NaN.
    """
    probs = _observation_probabilities(data, params, abilities)
    categories = np.arange(data.n_categories, dtype=np.float64)
    expected = expected_score(probs)
    variance = np.sum(
        (categories[np.newaxis, :] - expected[:, np.newaxis]) ** 2 * probs,
        axis=1,
    )
    variance = np.maximum(variance, 1e-12)
    sq_resid = (data.responses - expected) ** 2

    n_items = data.n_items
    n_obs = np.bincount(data.items, minlength=n_items)
    sum_sq = np.bincount(data.items, weights=sq_resid, minlength=n_items)
    sum_var = np.bincount(data.items, weights=variance, minlength=n_items)
    sum_z2 = np.bincount(
        data.items, weights=sq_resid / variance, minlength=n_items
    )

    with np.errstate(invalid="ignore", divide="ignore"):
        outfit = np.where(n_obs > 0, sum_z2 / n_obs, np.nan)
        infit = np.where(sum_var > 0, sum_sq / sum_var, np.nan)

    return ItemFit(
        item_id=np.arange(n_items, dtype=np.int64),
        n_observations=n_obs.astype(np.int64),
        infit=infit.astype(np.float64),
        outfit=outfit.astype(np.float64),
    )
