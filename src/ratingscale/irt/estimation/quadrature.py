"""
Gauss-Hermite quadrature over standardized person locations.

Persons are integrated over nodes z_q of N(mean, std²), by default the
standard normal. The estimator maps z_q to locations through the latent
regression, so one node set serves every person.
"""

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from ratingscale.irt.estimation.config import QuadratureConfig


@dataclass(frozen=True)
class GaussHermiteQuadrature:
    """
    Quadrature nodes and prior weights.

    Attributes:
        points: Nodes z_q, shape (n_points,).
        weights: Prior probability of each node, shape (n_points,).
            Weights sum to 1.
    """

    points: NDArray[np.float64]
    weights: NDArray[np.float64]

    @property
    def n_points(self) -> int:
        """Number of quadrature points."""
        return len(self.points)

    @property
    def log_weights(self) -> NDArray[np.float64]:
        """Log prior weights, floored so that underflowed nodes stay finite."""
        result: NDArray[np.float64] = np.log(self.weights + 1e-300)
        return result


def get_quadrature(config: QuadratureConfig) -> GaussHermiteQuadrature:
    """
    Build quadrature nodes for N(config.mean, config.std²).

    numpy's hermgauss integrates against exp(-x²); the nodes are rescaled by
    sqrt(2) and the weights by 1/sqrt(pi) to integrate against the standard
    normal, then shifted and scaled to the configured distribution.

    Args:
        config: Number of points, mean and standard deviation.

    Returns:
        GaussHermiteQuadrature with weights summing to 1.
    """
    x_phys, w_phys = np.polynomial.hermite.hermgauss(config.n_points)
    points = config.mean + config.std * np.sqrt(2.0) * x_phys
    weights = w_phys / np.sqrt(np.pi)

    return GaussHermiteQuadrature(
        points=points.astype(np.float64),
        weights=(weights / weights.sum()).astype(np.float64),
    )


def posterior_weights(
    log_likelihood: NDArray[np.float64],
    quadrature: GaussHermiteQuadrature,
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    Posterior over nodes for each person, and the marginal log-likelihood.

        P(z_q | y_j) ∝ P(y_j | z_q) w_q
        log P(y_j) = log Σ_q P(y_j | z_q) w_q

    Args:
        log_likelihood: log P(y_j | z_q), shape (n_persons, n_points).
        quadrature: Nodes and prior weights.

    Returns:
        Tuple (posteriors of shape (n_persons, n_points), log marginal
        likelihood per person of shape (n_persons,)).
    """
    joint = log_likelihood + quadrature.log_weights[np.newaxis, :]

    max_joint = np.max(joint, axis=1, keepdims=True)
    posteriors = np.exp(joint - max_joint)
    row_sums = posteriors.sum(axis=1, keepdims=True)
    posteriors = posteriors / row_sums

    log_marginal = max_joint[:, 0] + np.log(row_sums[:, 0])
    return posteriors, log_marginal
