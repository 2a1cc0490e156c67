"""
Observation log-likelihood of rating data.

Responses are 0-indexed categories (0..m) everywhere in this package.
Categorical primitives of external sampling engines use 1-indexed labels;
to_categorical_label and from_categorical_label are the only places the
shift happens.
"""

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ratingscale.core.data_models import ResponseData
from ratingscale.irt.parameters import RatingScaleParameters
from ratingscale.irt.probabilities import category_log_probabilities_batch


def to_categorical_label(responses: ArrayLike) -> NDArray[np.int64]:
    """Map categories 0..m to 1-indexed labels 1..m+1."""
    result: NDArray[np.int64] = np.asarray(responses, dtype=np.int64) + 1
    return result


def from_categorical_label(labels: ArrayLike) -> NDArray[np.int64]:
    """Map 1-indexed labels 1..m+1 back to categories 0..m."""
    result: NDArray[np.int64] = np.asarray(labels, dtype=np.int64) - 1
    return result


def check_compatible(
    data: ResponseData, params: RatingScaleParameters
) -> None:
    """
    Ensure params can score every observation in data.

    Raises:
        ValueError: If the number of categories differs, the data reference
            items the parameters do not have, or the covariate columns do
            not match the regression coefficients.
    """
    if data.n_categories != params.n_categories:
        raise ValueError(
            f"Data has {data.n_categories} categories, parameters have "
            f"{params.n_categories}"
        )
    if data.n_items > params.n_items:
        raise ValueError(
            f"Data has {data.n_items} items, parameters have {params.n_items}"
        )
    if data.n_covariates != params.n_covariates:
        raise ValueError(
            f"Data has {data.n_covariates} covariates, parameters have "
            f"{params.n_covariates} regression coefficients"
        )


def categorical_log_pmf(
    labels: ArrayLike, probabilities: ArrayLike
) -> NDArray[np.float64]:
    """
    Log-probability of 1-indexed labels under categorical distributions.

    Args:
        labels: Labels in 1..n_categories, shape (n,).
        probabilities: Category probabilities, shape (n, n_categories).

    Returns:
        log P(label) per row, shape (n,).
    """
    lab = np.asarray(labels, dtype=np.int64)
    probs = np.asarray(probabilities, dtype=np.float64)
    if probs.ndim != 2 or probs.shape[0] != lab.shape[0]:
        raise ValueError(
            f"probabilities must have shape ({lab.shape[0]}, n_categories), "
            f"got {probs.shape}"
        )
    if np.any(lab < 1) or np.any(lab > probs.shape[1]):
        raise ValueError(f"labels must be in [1, {probs.shape[1]}]")
    with np.errstate(divide="ignore"):
        result: NDArray[np.float64] = np.log(
            probs[np.arange(len(lab)), lab - 1]
        )
    return result


def observation_log_likelihood(
    params: RatingScaleParameters,
    data: ResponseData,
    abilities: ArrayLike,
) -> NDArray[np.float64]:
    """
    Log-likelihood of each observation given person abilities.

    Args:
        params: Model parameters.
        data: Observed ratings.
        abilities: Person abilities θ, shape (n_persons,).

    Returns:
        log P(y_n | θ_{j[n]}) per observation, shape (n_observations,).
    """
    theta = np.asarray(abilities, dtype=np.float64)
    if theta.shape != (data.n_persons,):
        raise ValueError(
            f"Expected {data.n_persons} abilities, got shape {theta.shape}"
        )
    check_compatible(data, params)

    locations = params.locations(theta, data.design)
    difficulties = np.array(params.difficulties, dtype=np.float64)
    alphas = params.item_discriminations()
    log_probs = category_log_probabilities_batch(
        locations[data.persons],
        difficulties[data.items],
        params.steps,
        alphas[data.items],
    )
    result: NDArray[np.float64] = log_probs[
        np.arange(data.n_observations), data.responses
    ]
    return result


def log_likelihood(
    params: RatingScaleParameters,
    data: ResponseData,
    abilities: ArrayLike,
) -> float:
    """Total log-likelihood of the data given person abilities."""
    return float(np.sum(observation_log_likelihood(params, data, abilities)))
