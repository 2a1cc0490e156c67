"""
Response sampling for rating scale models.

This module provides functions to sample ratings given person locations and
item parameters. Sampling always goes through the category probability
engine, so simulated data follow exactly the model being fitted.
"""

import numpy as np
from numpy.random import Generator
from numpy.typing import ArrayLike, NDArray

from ratingscale.core.utils import get_rng
from ratingscale.irt.parameters import RatingScaleParameters
from ratingscale.irt.probabilities import (
    category_probabilities,
    category_probabilities_batch,
)


def sample_response(
    location: float,
    difficulty: float,
    steps: ArrayLike,
    discrimination: float = 1.0,
    rng: Generator | None = None,
) -> int:
    """
    Sample a single rating.

    Args:
        location: Effective person location L.
        difficulty: Item difficulty β.
        steps: Step difficulties κ_1..κ_m.
        discrimination: Item discrimination α.
        rng: Random number generator.

    Returns:
        Sampled category in 0..m.
    """
    rng = get_rng(rng)

    probs = category_probabilities(location, difficulty, steps, discrimination)
    return int(rng.choice(len(probs), p=probs))


def sample_responses_batch(
    locations: ArrayLike,
    difficulties: ArrayLike,
    steps: ArrayLike,
    discriminations: ArrayLike | None = None,
    rng: Generator | None = None,
) -> NDArray[np.int64]:
    """
    Sample one rating for each (location, item) pair.

    Uses vectorized probability computation and sampling for efficiency.

    Args:
        locations: Effective locations, shape (n,).
        difficulties: Item difficulties, shape (n,) or scalar.
        steps: Step difficulties κ_1..κ_m.
        discriminations: Item discriminations, shape (n,), scalar or None.
        rng: Random number generator.

    Returns:
        Array of shape (n,) with categories in 0..m.
    """
    rng = get_rng(rng)

    probs = category_probabilities_batch(
        locations, difficulties, steps, discriminations
    )
    n, n_categories = probs.shape

    # Vectorized sampling using cumulative probabilities
    cumprobs = np.cumsum(probs, axis=1)
    u = rng.random(n)

    # Find the category index where cumulative probability exceeds u
    sampled = np.minimum(
        (cumprobs < u[:, np.newaxis]).sum(axis=1), n_categories - 1
    )
    return sampled.astype(np.int64)


def sample_person_responses(
    params: RatingScaleParameters,
    abilities: ArrayLike,
    covariates: ArrayLike | None = None,
    rng: Generator | None = None,
) -> NDArray[np.int64]:
    """
    Sample a complete person x item rating matrix.

    Args:
        params: Model parameters.
        abilities: Person abilities θ, shape (n_persons,).
        covariates: Covariate matrix W, used by the GRSM location.
        rng: Random number generator.

    Returns:
        Array of shape (n_persons, n_items) with categories in 0..m.
    """
    rng = get_rng(rng)

    locations = params.locations(abilities, covariates)
    n_persons = len(locations)
    difficulties = np.array(params.difficulties, dtype=np.float64)
    alphas = params.item_discriminations()

    # Row-major flattening: person j, item i -> j * n_items + i
    flat = sample_responses_batch(
        np.repeat(locations, params.n_items),
        np.tile(difficulties, n_persons),
        params.steps,
        np.tile(alphas, n_persons),
        rng,
    )
    return flat.reshape(n_persons, params.n_items)
