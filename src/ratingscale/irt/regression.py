"""
Latent regression of person locations on covariates.

Person abilities are centred on a person-specific mean μ_j = w_j'λ, where
w_j is row j of the covariate matrix W (column 0 conventionally the
intercept) and λ holds the regression coefficients.
"""

import numpy as np
from numpy.typing import ArrayLike, NDArray


def intercept_only_design(n_persons: int) -> NDArray[np.float64]:
    """Covariate matrix with a single intercept column, shape (J, 1)."""
    if n_persons < 1:
        raise ValueError(f"n_persons must be >= 1, got {n_persons}")
    return np.ones((n_persons, 1), dtype=np.float64)


def person_means(
    covariates: ArrayLike, regression: ArrayLike
) -> NDArray[np.float64]:
    """
    Compute the latent regression means μ = Wλ.

    Args:
        covariates: Covariate matrix W, shape (J, K).
        regression: Coefficients λ, shape (K,).

    Returns:
        Person means, shape (J,).
    """
    w = np.asarray(covariates, dtype=np.float64)
    lam = np.asarray(regression, dtype=np.float64)
    if w.ndim != 2:
        raise ValueError(f"covariates must be 2D, got shape {w.shape}")
    if lam.shape != (w.shape[1],):
        raise ValueError(
            f"Expected {w.shape[1]} regression coefficients, got {lam.shape}"
        )
    result: NDArray[np.float64] = w @ lam
    return result


def person_locations(
    abilities: ArrayLike,
    covariates: ArrayLike | None = None,
    regression: ArrayLike | None = None,
) -> NDArray[np.float64]:
    """
    Effective locations entering the category probabilities.

    When covariates and regression are given, the regression mean is added
    to the abilities (L_j = θ_j + μ_j). Otherwise the abilities already
    carry the regression in their prior mean and L_j = θ_j.

    Args:
        abilities: Person abilities θ, shape (J,).
        covariates: Covariate matrix W, shape (J, K), or None.
        regression: Coefficients λ, shape (K,), or None.

    Returns:
        Locations, shape (J,).
    """
    theta = np.asarray(abilities, dtype=np.float64)
    if covariates is None and regression is None:
        return theta.copy()
    if covariates is None or regression is None:
        raise ValueError("covariates and regression must be given together")
    mu = person_means(covariates, regression)
    if mu.shape != theta.shape:
        raise ValueError(
            f"abilities shape {theta.shape} does not match "
            f"covariates rows {mu.shape}"
        )
    result: NDArray[np.float64] = theta + mu
    return result
