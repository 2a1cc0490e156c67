from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict

from ratingscale.irt.estimation.enums import ConvergenceStatus
from ratingscale.irt.parameters import ModelKind, RatingScaleParameters


@dataclass
class EStepResult:
    """
    Results from the E-step of EM algorithm.

    Attributes:
        posteriors: Posterior weights, shape (n_persons, n_quadrature_points).
            posteriors[j, q] = P(z = z_q | responses_j, params).
        log_likelihood: Marginal log-likelihood for current parameters.
    """

    posteriors: NDArray[np.float64]
    log_likelihood: float


class EstimationResult(BaseModel):
    """
    Result of rating scale model estimation.

    Attributes:
        parameters: Estimated model parameters.
        log_likelihood: Final marginal log-likelihood value.
        n_iterations: Number of EM iterations performed.
        convergence_status: Status indicating how estimation terminated.
        model_version: Version string for reproducibility tracking.
        n_persons: Number of persons the marginal likelihood sums over.
    """

    model_config = ConfigDict(frozen=True)

    parameters: RatingScaleParameters
    log_likelihood: float
    n_iterations: int
    convergence_status: ConvergenceStatus
    model_version: str
    n_persons: int

    @property
    def model(self) -> ModelKind:
        return self.parameters.model

    @property
    def n_parameters(self) -> int:
        """Number of free parameters (identification constraints removed)."""
        params = self.parameters
        return RatingScaleParameters.n_free_parameters(
            params.model,
            params.n_items,
            params.n_categories,
            params.n_covariates,
        )

    @property
    def aic(self) -> float:
        return -2.0 * self.log_likelihood + 2.0 * self.n_parameters

    @property
    def bic(self) -> float:
        """BIC with the number of persons as the sample size."""
        return -2.0 * self.log_likelihood + self.n_parameters * float(
            np.log(self.n_persons)
        )

    @property
    def n_items(self) -> int:
        """Number of items in the model."""
        return self.parameters.n_items

    @property
    def converged(self) -> bool:
        """Whether estimation converged successfully."""
        return self.convergence_status == ConvergenceStatus.CONVERGED
