"""
Ability estimation for rating scale models.

This module provides Expected A Posteriori (EAP) ability estimation given
fixed model parameters.
"""

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from ratingscale.core.data_models import ResponseData
from ratingscale.irt.estimation.config import EstimationConfig
from ratingscale.irt.estimation.gradients import (
    location_terms,
    person_log_likelihood_kernel,
)
from ratingscale.irt.estimation.quadrature import (
    get_quadrature,
    posterior_weights,
)
from ratingscale.irt.likelihood import check_compatible
from ratingscale.irt.parameters import ModelKind, RatingScaleParameters


@dataclass(frozen=True)
class AbilityEstimates:
    """
    Ability estimates for persons.

    Attributes:
        eap: Expected A Posteriori (posterior mean) estimates, shape (n_persons,).
        se: Standard errors (posterior standard deviation), shape (n_persons,).
    """

    eap: NDArray[np.float64]
    se: NDArray[np.float64]

    @property
    def n_persons(self) -> int:
        """Number of persons."""
        return len(self.eap)


def estimate_abilities(
    data: ResponseData,
    params: RatingScaleParameters,
    config: EstimationConfig | None = None,
) -> AbilityEstimates:
    """
    Estimate abilities using Expected A Posteriori (EAP) method.

    The posterior over standardized nodes z_q is
        P(z_q | responses) ∝ P(responses | L_jq) * w_q
    and the ability is θ = μ_j + σ z (RSM) or θ = z (GRSM, where the
    regression enters the location separately). Persons without
    observations get their prior mean and standard deviation.

    Args:
        data: Response data.
        params: Model parameters.
        config: Estimation configuration. Uses defaults if None.

    Returns:
        AbilityEstimates with EAP estimates and standard errors.

    Raises:
        ValueError: If params do not match the items, categories or
            covariates of data.
    """
    if config is None:
        config = EstimationConfig()
    check_compatible(data, params)

    quadrature = get_quadrature(config.quadrature)
    nodes = quadrature.points
    mu, scale = location_terms(params, data.design)

    log_lik = person_log_likelihood_kernel(
        mu,
        scale,
        nodes,
        data.items,
        data.persons,
        data.responses,
        np.array(params.difficulties, dtype=np.float64),
        params.item_discriminations(),
        np.array(params.steps, dtype=np.float64),
    )
    posteriors, _ = posterior_weights(log_lik, quadrature)

    # Posterior moments of z
    z_mean = posteriors @ nodes
    z_var = np.maximum(posteriors @ nodes**2 - z_mean**2, 0.0)
    z_sd = np.sqrt(z_var)

    if params.model == ModelKind.RSM:
        eap = mu + scale * z_mean
        se = scale * z_sd
    else:
        eap = z_mean
        se = z_sd

    return AbilityEstimates(
        eap=eap.astype(np.float64), se=se.astype(np.float64)
    )
