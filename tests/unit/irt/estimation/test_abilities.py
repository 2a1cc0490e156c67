import numpy as np
import pytest

from ratingscale.core.data_models import ResponseData
from ratingscale.core.utils import get_rng
from ratingscale.irt.estimation.abilities import estimate_abilities
from ratingscale.irt.estimation.config import EstimationConfig, QuadratureConfig
from ratingscale.irt.parameters import RatingScaleParameters
from ratingscale.irt.sampling import sample_person_responses

CONFIG = EstimationConfig(quadrature=QuadratureConfig(n_points=41))


@pytest.fixture
def rsm_params() -> RatingScaleParameters:
    return RatingScaleParameters(
        difficulties=(-1.0, -0.5, 0.0, 0.5, 1.0),
        steps=(-1.0, 0.0, 1.0),
        regression=(0.5,),
        sigma=1.5,
    )


class TestEstimateAbilities:
    def test_higher_scores_higher_ability(
        self, rsm_params: RatingScaleParameters
    ) -> None:
        matrix = np.array([[0] * 5, [1] * 5, [2] * 5, [3] * 5])
        data = ResponseData.from_matrix(matrix, n_categories=4)

        estimates = estimate_abilities(data, rsm_params, CONFIG)

        assert estimates.n_persons == 4
        assert np.all(np.diff(estimates.eap) > 0)
        assert np.all(estimates.se > 0)
        assert np.all(estimates.se < 1.5)

    def test_unobserved_person_gets_prior(
        self, rsm_params: RatingScaleParameters
    ) -> None:
        """Person 2 has a covariate row but no ratings."""
        data = ResponseData(
            items=np.array([0, 1, 0], dtype=np.int64),
            persons=np.array([0, 0, 1], dtype=np.int64),
            responses=np.array([1, 2, 3], dtype=np.int64),
            n_categories=4,
            covariates=np.ones((3, 1)),
        )

        estimates = estimate_abilities(data, rsm_params, CONFIG)

        np.testing.assert_allclose(estimates.eap[2], 0.5, atol=1e-8)
        np.testing.assert_allclose(estimates.se[2], 1.5, rtol=1e-6)

    def test_grsm_abilities_exclude_regression(self) -> None:
        params = RatingScaleParameters(
            difficulties=(0.0,),
            steps=(0.0,),
            regression=(2.0,),
            discriminations=(1.0,),
        )
        data = ResponseData(
            items=np.array([0], dtype=np.int64),
            persons=np.array([0], dtype=np.int64),
            responses=np.array([0], dtype=np.int64),
            n_categories=2,
            covariates=np.ones((2, 1)),
        )

        estimates = estimate_abilities(data, params, CONFIG)

        # the unobserved person sits at the N(0, 1) prior
        np.testing.assert_allclose(estimates.eap[1], 0.0, atol=1e-8)
        assert estimates.eap[0] < 0.0

    def test_recovers_simulated_abilities(
        self, rsm_params: RatingScaleParameters
    ) -> None:
        rng = get_rng(42)
        theta = 0.5 + 1.5 * rng.normal(size=400)
        matrix = sample_person_responses(rsm_params, theta, rng=rng)
        data = ResponseData.from_matrix(matrix, n_categories=4)

        estimates = estimate_abilities(data, rsm_params, CONFIG)

        assert np.corrcoef(estimates.eap, theta)[0, 1] > 0.85

    def test_category_mismatch(self, rsm_params: RatingScaleParameters) -> None:
        data = ResponseData.from_matrix(np.array([[0, 1]]), n_categories=2)

        with pytest.raises(ValueError, match="categories"):
            estimate_abilities(data, rsm_params, CONFIG)

    def test_fewer_items_than_data(self) -> None:
        """Parameters must cover every item index in the data."""
        data = ResponseData.from_matrix(
            np.array([[0, 1, 2], [3, 2, 1]]), n_categories=4
        )
        params = RatingScaleParameters(
            difficulties=(-0.5, 0.5), steps=(-1.0, 0.0, 1.0)
        )

        with pytest.raises(ValueError, match="items"):
            estimate_abilities(data, params, CONFIG)

    def test_covariate_mismatch(self, rsm_params: RatingScaleParameters) -> None:
        data = ResponseData.from_matrix(
            np.array([[0, 1, 2, 3, 0], [3, 2, 1, 0, 3]]),
            n_categories=4,
            covariates=np.array([[1.0, 0.2], [1.0, -0.4]]),
        )

        with pytest.raises(ValueError, match="covariates"):
            estimate_abilities(data, rsm_params, CONFIG)
