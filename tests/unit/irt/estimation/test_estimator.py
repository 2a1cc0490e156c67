import logging

import numpy as np
import pytest

from ratingscale.core.data_models import ResponseData
from ratingscale.core.utils import get_rng
from ratingscale.irt.estimation.config import (
    ConvergenceConfig,
    EstimationConfig,
    QuadratureConfig,
)
from ratingscale.irt.estimation.enums import ConvergenceStatus
from ratingscale.irt.estimation.estimator import RatingScaleEstimator
from ratingscale.irt.estimation.starting_values import compute_starting_values
from ratingscale.irt.parameters import ModelKind, RatingScaleParameters
from ratingscale.irt.sampling import sample_person_responses

SMALL_CONFIG = EstimationConfig(
    quadrature=QuadratureConfig(n_points=21),
    convergence=ConvergenceConfig(max_em_iterations=500, em_tolerance=1e-6),
)


def simulate(model: ModelKind, n_persons: int = 300, seed: int = 42) -> ResponseData:
    rng = get_rng(seed)
    discriminations = (0.8, 1.2, 1.0, 1.5, 0.7) if model == ModelKind.GRSM else None
    params = RatingScaleParameters(
        difficulties=(-0.8, -0.2, 0.0, 0.4, 0.6),
        steps=(-1.0, 0.1, 0.9),
        regression=(0.3,),
        sigma=1.0,
        discriminations=discriminations,
    )
    theta = rng.normal(0.0, 1.0, size=n_persons)
    if model == ModelKind.RSM:
        theta = theta + 0.3
    matrix = sample_person_responses(params, theta, rng=rng)
    return ResponseData.from_matrix(matrix, n_categories=4)


class TestRatingScaleEstimator:
    @pytest.mark.parametrize("model", [ModelKind.RSM, ModelKind.GRSM])
    def test_fit_converges(self, model: ModelKind) -> None:
        data = simulate(model)
        result = RatingScaleEstimator(model, SMALL_CONFIG).fit(data)

        assert result.convergence_status == ConvergenceStatus.CONVERGED
        assert result.model == model
        assert result.n_items == 5
        assert np.isfinite(result.log_likelihood)
        np.testing.assert_allclose(
            sum(result.parameters.difficulties), 0.0, atol=1e-8
        )
        np.testing.assert_allclose(sum(result.parameters.steps), 0.0, atol=1e-8)

    def test_fit_improves_on_starting_values(self) -> None:
        data = simulate(ModelKind.RSM)
        estimator = RatingScaleEstimator(ModelKind.RSM, SMALL_CONFIG)

        start = compute_starting_values(data, ModelKind.RSM)
        start_ll = estimator._e_step(data, start).log_likelihood
        result = estimator.fit(data)

        assert result.log_likelihood > start_ll

    def test_em_does_not_decrease_likelihood(self) -> None:
        data = simulate(ModelKind.RSM, n_persons=150)
        estimator = RatingScaleEstimator(ModelKind.RSM, SMALL_CONFIG)

        params = compute_starting_values(data, ModelKind.RSM)
        e_result = estimator._e_step(data, params)
        history = [e_result.log_likelihood]
        for _ in range(5):
            params = estimator._m_step(data, e_result.posteriors, params)
            e_result = estimator._e_step(data, params)
            history.append(e_result.log_likelihood)

        assert np.all(np.diff(history) > -1e-6)

    def test_ordered_difficulties_recovered(self) -> None:
        data = simulate(ModelKind.RSM, n_persons=600)
        result = RatingScaleEstimator(ModelKind.RSM, SMALL_CONFIG).fit(data)

        difficulties = np.array(result.parameters.difficulties)
        assert difficulties[0] < difficulties[2] < difficulties[4]

    def test_max_iterations_status(self) -> None:
        config = EstimationConfig(
            quadrature=QuadratureConfig(n_points=11),
            convergence=ConvergenceConfig(max_em_iterations=1),
        )
        result = RatingScaleEstimator(ModelKind.RSM, config).fit(
            simulate(ModelKind.RSM, n_persons=100)
        )

        assert result.convergence_status == ConvergenceStatus.MAX_ITERATIONS
        assert result.n_iterations == 1

    def test_initial_model_mismatch(self) -> None:
        data = simulate(ModelKind.RSM, n_persons=50)
        initial = RatingScaleParameters.create_default(ModelKind.GRSM, 5, 4)

        with pytest.raises(ValueError, match="estimator fits rsm"):
            RatingScaleEstimator(ModelKind.RSM, SMALL_CONFIG).fit(data, initial)

    def test_initial_with_fewer_items(self) -> None:
        data = simulate(ModelKind.RSM, n_persons=50)
        initial = RatingScaleParameters.create_default(ModelKind.RSM, 3, 4)

        with pytest.raises(ValueError, match="items"):
            RatingScaleEstimator(ModelKind.RSM, SMALL_CONFIG).fit(data, initial)

    def test_initial_covariate_mismatch(self) -> None:
        data = simulate(ModelKind.GRSM, n_persons=50)
        initial = RatingScaleParameters.create_default(
            ModelKind.GRSM, 5, 4, n_covariates=2
        )

        with pytest.raises(ValueError, match="covariates"):
            RatingScaleEstimator(ModelKind.GRSM, SMALL_CONFIG).fit(data, initial)

    def test_accepts_model_name(self) -> None:
        assert RatingScaleEstimator("grsm").model == ModelKind.GRSM

    def test_logs_progress(self, caplog: pytest.LogCaptureFixture) -> None:
        data = simulate(ModelKind.RSM, n_persons=50)
        with caplog.at_level(logging.INFO, logger="ratingscale"):
            RatingScaleEstimator(ModelKind.RSM, SMALL_CONFIG).fit(data)

        assert "Fitting RSM" in caplog.text
        assert "EM finished" in caplog.text


class TestConvergenceCheck:
    def test_first_iteration_never_converged(self) -> None:
        estimator = RatingScaleEstimator()

        assert not estimator._check_convergence(-100.0, -np.inf)

    def test_relative_change(self) -> None:
        estimator = RatingScaleEstimator()

        assert estimator._check_convergence(-1000.0, -1000.0000001)
        assert not estimator._check_convergence(-1000.0, -1001.0)


class TestBounds:
    def test_layout_matches_free_parameters(self) -> None:
        for model in [ModelKind.RSM, ModelKind.GRSM]:
            bounds = RatingScaleEstimator(model)._bounds(6, 5, 2)

            assert len(bounds) == RatingScaleParameters.n_free_parameters(
                model, 6, 5, 2
            )
