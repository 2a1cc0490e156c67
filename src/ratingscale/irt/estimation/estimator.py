"""
Rating scale model estimator using the MML-EM algorithm.

Fits the RSM or the GRSM with latent regression by Marginal Maximum
Likelihood. Person locations are integrated over standardized Gauss-Hermite
nodes, so the E-step posterior weights do not depend on the regression and
scale parameters and all parameters are updated jointly in the M-step.
"""

import logging

import numpy as np
from scipy.optimize import minimize

from ratingscale.core.data_models import ResponseData
from ratingscale.irt.estimation.config import EstimationConfig
from ratingscale.irt.estimation.data_models import (
    EStepResult,
    EstimationResult,
)
from ratingscale.irt.estimation.enums import ConvergenceStatus
from ratingscale.irt.estimation.gradients import (
    location_terms,
    negative_expected_log_likelihood,
    person_log_likelihood_kernel,
)
from ratingscale.irt.estimation.quadrature import (
    GaussHermiteQuadrature,
    get_quadrature,
    posterior_weights,
)
from ratingscale.irt.estimation.starting_values import compute_starting_values
from ratingscale.irt.likelihood import check_compatible
from ratingscale.irt.parameters import ModelKind, RatingScaleParameters

logger = logging.getLogger(__name__)


class RatingScaleEstimator:
    """
    (Generalized) rating scale model estimator using MML-EM.

    The probability model:
        P(Y=k | L) ∝ exp(Σ_{s≤k} α_i (L - β_i - κ_s))
    with L_j = w_j'λ + σ z (RSM, α = 1) or L_j = w_j'λ + z (GRSM),
    z ~ N(0, 1).

    Identification: Σβ_i = 0, Σκ_s = 0.

    Uses L-BFGS-B for M-step optimization with analytical gradients.
    """

    def __init__(
        self,
        model: ModelKind = ModelKind.RSM,
        config: EstimationConfig | None = None,
    ):
        """Initialize rating scale estimator."""
        self.model = ModelKind(model)
        self.config = config or EstimationConfig()
        self._quadrature = get_quadrature(self.config.quadrature)

    @property
    def quadrature(self) -> GaussHermiteQuadrature:
        """Access quadrature points and weights."""
        return self._quadrature

    def _check_convergence(self, current_ll: float, prev_ll: float) -> bool:
        """
        Check if EM has converged based on relative log-likelihood change.

        Args:
            current_ll: Current log-likelihood.
            prev_ll: Previous log-likelihood.

        Returns:
            True if converged.
        """
        if prev_ll == -np.inf:
            return False

        rel_change = abs(current_ll - prev_ll) / max(abs(prev_ll), 1.0)
        return bool(rel_change < self.config.convergence.em_tolerance)

    def _e_step(
        self,
        data: ResponseData,
        params: RatingScaleParameters,
    ) -> EStepResult:
        """
        E-step: compute posterior distribution over quadrature nodes.

        For each person:
            P(z_q | responses) ∝ P(responses | L_jq) * P(z_q)

        where P(z_q) is the quadrature weight (prior).

        Args:
            data: Response data.
            params: Current parameters.

        Returns:
            EStepResult with posteriors and marginal log-likelihood.
        """
        mu, scale = location_terms(params, data.design)
        log_lik = person_log_likelihood_kernel(
            mu,
            scale,
            self._quadrature.points,
            data.items,
            data.persons,
            data.responses,
            np.array(params.difficulties, dtype=np.float64),
            params.item_discriminations(),
            np.array(params.steps, dtype=np.float64),
        )

        posteriors, log_marginal = posterior_weights(log_lik, self._quadrature)
        total_ll = float(np.sum(log_marginal))

        return EStepResult(posteriors=posteriors, log_likelihood=total_ll)

    def _bounds(
        self, n_items: int, n_categories: int, n_covariates: int
    ) -> list[tuple[float, float]]:
        """L-BFGS-B bounds in the free parameter layout."""
        bounds = self.config.bounds
        result = [bounds.difficulty] * (n_items - 1)
        result += [bounds.step] * (n_categories - 2)
        result += [bounds.regression] * n_covariates
        if self.model == ModelKind.RSM:
            result += [bounds.log_sigma]
        else:
            result += [bounds.log_discrimination] * n_items
        return result

    def _m_step(
        self,
        data: ResponseData,
        posteriors: np.ndarray,
        current: RatingScaleParameters,
    ) -> RatingScaleParameters:
        """
        M-step: optimize all free parameters given posteriors.

        Args:
            data: Response data.
            posteriors: Posterior weights from E-step.
            current: Current parameter estimates.

        Returns:
            Updated parameter estimates.
        """
        n_items = current.n_items
        n_categories = data.n_categories
        design = np.ascontiguousarray(data.design, dtype=np.float64)

        result = minimize(
            fun=negative_expected_log_likelihood,
            x0=current.to_array(),
            args=(
                self.model,
                n_items,
                n_categories,
                design,
                self._quadrature.points,
                np.ascontiguousarray(posteriors, dtype=np.float64),
                data.items,
                data.persons,
                data.responses,
                self.config.penalty.lambda_penalty,
            ),
            method="L-BFGS-B",
            jac=True,
            bounds=self._bounds(n_items, n_categories, design.shape[1]),
            options={
                "maxiter": self.config.convergence.max_lbfgs_iterations,
                "ftol": self.config.convergence.lbfgs_tolerance,
            },
        )
        if not result.success:
            logger.debug(f"M-step optimizer stopped early: {result.message}")

        return RatingScaleParameters.from_array(
            result.x, self.model, n_items, n_categories, design.shape[1]
        )

    def fit(
        self,
        data: ResponseData,
        initial: RatingScaleParameters | None = None,
    ) -> EstimationResult:
        """
        Fit the model to response data using MML-EM.

        Args:
            data: Response data.
            initial: Optional starting parameters. Computed from the data
                if None.

        Returns:
            EstimationResult with estimated parameters and fit statistics.

        Raises:
            ValueError: If initial is for another model or does not match
                the items, categories or covariates of data.
        """
        if initial is None:
            params = compute_starting_values(data, self.model)
        else:
            if initial.model != self.model:
                raise ValueError(
                    f"Initial parameters are {initial.model.value}, "
                    f"estimator fits {self.model.value}"
                )
            check_compatible(data, initial)
            params = initial

        logger.info(
            f"Fitting {self.model.value.upper()} to {data.n_observations} "
            f"observations ({data.n_persons} persons, {data.n_items} items, "
            f"{data.n_categories} categories)"
        )

        prev_ll = -np.inf
        convergence_status = ConvergenceStatus.MAX_ITERATIONS
        n_iterations = self.config.convergence.max_em_iterations
        e_result = self._e_step(data, params)

        for iteration in range(self.config.convergence.max_em_iterations):
            logger.debug(
                f"Iteration {iteration + 1}: "
                f"LL = {e_result.log_likelihood:.4f}"
            )

            if not np.isfinite(e_result.log_likelihood):
                convergence_status = ConvergenceStatus.FAILED
                n_iterations = iteration + 1
                break

            if self._check_convergence(e_result.log_likelihood, prev_ll):
                convergence_status = ConvergenceStatus.CONVERGED
                n_iterations = iteration + 1
                break

            prev_ll = e_result.log_likelihood
            params = self._m_step(data, e_result.posteriors, params)
            e_result = self._e_step(data, params)

        logger.info(
            f"EM finished: {convergence_status.value} after {n_iterations} "
            f"iterations, LL = {e_result.log_likelihood:.4f}"
        )

        return EstimationResult(
            parameters=params,
            log_likelihood=e_result.log_likelihood,
            n_iterations=n_iterations,
            convergence_status=convergence_status,
            model_version=self.config.model_version,
            n_persons=data.n_persons,
        )
