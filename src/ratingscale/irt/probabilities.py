"""
Category probabilities for the rating scale model family.

The generalized rating scale model (GRSM) gives the probability of
responding in category k (0..m) of item i at location L as:
    P(Y=k | L) = exp(C_k) / Σ_h exp(C_h)
    C_0 = 0,  C_k = Σ_{s=1..k} α_i * (L - β_i - κ_s)

The plain rating scale model (RSM) is the special case α_i = 1.

Category 0 is the reference: its numerator is exp(0) and it is normalized by
the same sum as every other category. Cumulative logits are shifted by their
row maximum before exponentiation, which leaves the normalized output
unchanged.
"""

import math

import numpy as np
from numba import njit  # type: ignore
from numpy.typing import ArrayLike, NDArray

from ratingscale.core.errors import InvalidParameterError


@njit  # type: ignore
def _cumulative_logits_kernel(
    locations: NDArray[np.float64],
    difficulties: NDArray[np.float64],
    discriminations: NDArray[np.float64],
    steps: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Running sums C_0..C_m for each (location, item) pair, shape (n, m+1)."""
    n = locations.shape[0]
    m = steps.shape[0]
    out = np.empty((n, m + 1), dtype=np.float64)
    for r in range(n):
        out[r, 0] = 0.0
        base = locations[r] - difficulties[r]
        for k in range(m):
            out[r, k + 1] = out[r, k] + discriminations[r] * (base - steps[k])
    return out


@njit  # type: ignore
def _normalize_kernel(logits: NDArray[np.float64]) -> NDArray[np.float64]:
    """Row-wise softmax with max shift."""
    n, width = logits.shape
    out = np.empty((n, width), dtype=np.float64)
    for r in range(n):
        mx = logits[r, 0]
        for k in range(1, width):
            if logits[r, k] > mx:
                mx = logits[r, k]
        total = 0.0
        for k in range(width):
            e = math.exp(logits[r, k] - mx)
            out[r, k] = e
            total += e
        for k in range(width):
            out[r, k] /= total
    return out


@njit  # type: ignore
def _log_normalize_kernel(logits: NDArray[np.float64]) -> NDArray[np.float64]:
    """Row-wise log-softmax with max shift."""
    n, width = logits.shape
    out = np.empty((n, width), dtype=np.float64)
    for r in range(n):
        mx = logits[r, 0]
        for k in range(1, width):
            if logits[r, k] > mx:
                mx = logits[r, k]
        total = 0.0
        for k in range(width):
            total += math.exp(logits[r, k] - mx)
        log_norm = mx + math.log(total)
        for k in range(width):
            out[r, k] = logits[r, k] - log_norm
    return out


def _as_finite_array(values: ArrayLike, name: str) -> NDArray[np.float64]:
    arr = np.ascontiguousarray(values, dtype=np.float64)
    if not np.all(np.isfinite(arr)):
        raise InvalidParameterError(f"{name} must be finite, got {values}")
    return arr


def _validate_steps(
    steps: ArrayLike, n_categories: int | None
) -> NDArray[np.float64]:
    arr = _as_finite_array(steps, "steps")
    if arr.ndim != 1:
        raise InvalidParameterError(
            f"steps must be one-dimensional, got shape {arr.shape}"
        )
    if n_categories is not None and len(arr) != n_categories - 1:
        raise InvalidParameterError(
            f"Expected {n_categories - 1} step difficulties for "
            f"{n_categories} categories, got {len(arr)}"
        )
    return arr


def _prepare_batch(
    locations: ArrayLike,
    difficulties: ArrayLike,
    steps: ArrayLike,
    discriminations: ArrayLike | None,
    n_categories: int | None,
) -> tuple[
    NDArray[np.float64],
    NDArray[np.float64],
    NDArray[np.float64],
    NDArray[np.float64],
]:
    """Validate inputs and broadcast them to contiguous 1D arrays."""
    loc = _as_finite_array(locations, "locations")
    diff = _as_finite_array(difficulties, "difficulties")
    kappa = _validate_steps(steps, n_categories)
    if discriminations is None:
        disc = np.ones(1, dtype=np.float64)
    else:
        disc = _as_finite_array(discriminations, "discriminations")
        if np.any(disc <= 0):
            raise InvalidParameterError(
                f"Discriminations must be positive, got {discriminations}"
            )

    try:
        loc_b, diff_b, disc_b = np.broadcast_arrays(
            np.atleast_1d(loc), np.atleast_1d(diff), np.atleast_1d(disc)
        )
    except ValueError as e:
        raise InvalidParameterError(
            f"locations, difficulties and discriminations must broadcast: {e}"
        ) from e
    if loc_b.ndim != 1:
        raise InvalidParameterError(
            f"Batch inputs must be one-dimensional, got shape {loc_b.shape}"
        )

    return (
        np.ascontiguousarray(loc_b),
        np.ascontiguousarray(diff_b),
        np.ascontiguousarray(kappa),
        np.ascontiguousarray(disc_b),
    )


def _finite_logits(
    loc: NDArray[np.float64],
    diff: NDArray[np.float64],
    disc: NDArray[np.float64],
    kappa: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Run the logits kernel; a running sum that overflows float64 is rejected."""
    logits: NDArray[np.float64] = _cumulative_logits_kernel(
        loc, diff, disc, kappa
    )
    if not np.all(np.isfinite(logits)):
        raise InvalidParameterError(
            "Cumulative logits overflow float64; locations, difficulties, "
            "steps or discriminations are too large in magnitude"
        )
    return logits


def cumulative_logits_batch(
    locations: ArrayLike,
    difficulties: ArrayLike,
    steps: ArrayLike,
    discriminations: ArrayLike | None = None,
) -> NDArray[np.float64]:
    """
    Compute cumulative logits for many (location, item) pairs.

    Args:
        locations: Effective person locations, shape (n,).
        difficulties: Item difficulties, shape (n,) or scalar.
        steps: Step difficulties κ_1..κ_m shared by all items.
        discriminations: Item discriminations, shape (n,) or scalar.
            Defaults to 1 (plain RSM).

    Returns:
        Array of shape (n, m+1) with C_0 = 0 in the first column.

    Raises:
        InvalidParameterError: On non-finite inputs or non-positive
            discriminations, or when the cumulative logits overflow.
    """
    loc, diff, kappa, disc = _prepare_batch(
        locations, difficulties, steps, discriminations, None
    )
    return _finite_logits(loc, diff, disc, kappa)


def category_probabilities_batch(
    locations: ArrayLike,
    difficulties: ArrayLike,
    steps: ArrayLike,
    discriminations: ArrayLike | None = None,
    n_categories: int | None = None,
) -> NDArray[np.float64]:
    """
    Compute category probabilities for many (location, item) pairs.

    Each row is evaluated independently with the same algorithm as
    category_probabilities.

    Args:
        locations: Effective person locations, shape (n,).
        difficulties: Item difficulties, shape (n,) or scalar.
        steps: Step difficulties κ_1..κ_m shared by all items.
        discriminations: Item discriminations, shape (n,) or scalar.
            Defaults to 1 (plain RSM).
        n_categories: If given, steps must have exactly n_categories - 1
            entries.

    Returns:
        Array of shape (n, m+1); each row sums to 1.

    Raises:
        InvalidParameterError: On non-finite inputs, non-positive
            discriminations or a wrong number of steps.
    """
    loc, diff, kappa, disc = _prepare_batch(
        locations, difficulties, steps, discriminations, n_categories
    )
    logits = _finite_logits(loc, diff, disc, kappa)
    result: NDArray[np.float64] = _normalize_kernel(logits)
    return result


def category_log_probabilities_batch(
    locations: ArrayLike,
    difficulties: ArrayLike,
    steps: ArrayLike,
    discriminations: ArrayLike | None = None,
    n_categories: int | None = None,
) -> NDArray[np.float64]:
    """
    Log of category_probabilities_batch, computed without taking log(P).

    Stays finite for categories whose probability underflows to zero.
    """
    loc, diff, kappa, disc = _prepare_batch(
        locations, difficulties, steps, discriminations, n_categories
    )
    logits = _finite_logits(loc, diff, disc, kappa)
    result: NDArray[np.float64] = _log_normalize_kernel(logits)
    return result


def cumulative_logits(
    location: float,
    difficulty: float,
    steps: ArrayLike,
    discrimination: float = 1.0,
) -> NDArray[np.float64]:
    """
    Compute the cumulative logits C_0..C_m for one person and item.

    Args:
        location: Effective person location L.
        difficulty: Item difficulty β.
        steps: Step difficulties κ_1..κ_m.
        discrimination: Item discrimination α (> 0).

    Returns:
        Array of shape (m+1,) with C_0 = 0.
    """
    logits = cumulative_logits_batch(
        [location], [difficulty], steps, [discrimination]
    )
    result: NDArray[np.float64] = logits[0]
    return result


def category_probabilities(
    location: float,
    difficulty: float,
    steps: ArrayLike,
    discrimination: float = 1.0,
    n_categories: int | None = None,
) -> NDArray[np.float64]:
    """
    Compute response category probabilities for one person and item.

    Args:
        location: Effective person location L (θ, or θ + μ when the latent
            regression is separated from the ability).
        difficulty: Item difficulty β.
        steps: Step difficulties κ_1..κ_m, the last already derived from
            the sum-to-zero constraint. Empty for a single category.
        discrimination: Item discrimination α (> 0). 1 gives the RSM.
        n_categories: If given, steps must have exactly n_categories - 1
            entries.

    Returns:
        Array of shape (m+1,) with probabilities of categories 0..m.

    Raises:
        InvalidParameterError: If discrimination <= 0, any input is
            non-finite, steps has the wrong length, or the
            cumulative logits overflow.
    """
    probs = category_probabilities_batch(
        [location], [difficulty], steps, [discrimination], n_categories
    )
    result: NDArray[np.float64] = probs[0]
    return result


def rating_scale_probabilities(
    location: float,
    difficulty: float,
    steps: ArrayLike,
    n_categories: int | None = None,
) -> NDArray[np.float64]:
    """Category probabilities of the plain rating scale model (α = 1)."""
    return category_probabilities(
        location, difficulty, steps, 1.0, n_categories
    )


def expected_score(probabilities: ArrayLike) -> NDArray[np.float64]:
    """
    Expected category Σ_k k * P_k.

    Args:
        probabilities: Shape (m+1,) or (n, m+1).

    Returns:
        Scalar array or shape (n,).
    """
    probs = np.asarray(probabilities, dtype=np.float64)
    categories = np.arange(probs.shape[-1], dtype=np.float64)
    result: NDArray[np.float64] = probs @ categories
    return result
