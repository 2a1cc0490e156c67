import numpy as np
import pytest

from ratingscale.core.data_models import ResponseData
from ratingscale.core.utils import get_rng
from ratingscale.irt.diagnostics import (
    compute_category_comparison,
    compute_item_fit,
)
from ratingscale.irt.parameters import RatingScaleParameters
from ratingscale.irt.sampling import sample_person_responses


@pytest.fixture
def params() -> RatingScaleParameters:
    return RatingScaleParameters(
        difficulties=(-0.6, 0.1, 0.5),
        steps=(-1.0, 0.0, 1.0),
    )


@pytest.fixture
def simulated(params: RatingScaleParameters) -> tuple[ResponseData, np.ndarray]:
    rng = get_rng(42)
    theta = rng.normal(0, 1, size=2000)
    matrix = sample_person_responses(params, theta, rng=rng)
    return ResponseData.from_matrix(matrix, n_categories=4), theta


class TestCategoryComparison:
    def test_one_row_per_item_category(
        self, params: RatingScaleParameters, simulated
    ) -> None:
        data, theta = simulated
        comparison = compute_category_comparison(data, params, theta)

        assert len(comparison.item_id) == 3 * 4
        np.testing.assert_array_equal(comparison.category[:4], [0, 1, 2, 3])
        np.testing.assert_allclose(
            comparison.difference,
            comparison.empirical_prob - comparison.model_prob,
        )

    def test_true_model_fits(self, params: RatingScaleParameters, simulated) -> None:
        data, theta = simulated
        comparison = compute_category_comparison(data, params, theta)

        assert np.max(np.abs(comparison.difference)) < 0.04

    def test_ability_shape(self, params: RatingScaleParameters, simulated) -> None:
        data, _ = simulated

        with pytest.raises(ValueError, match="abilities"):
            compute_category_comparison(data, params, np.zeros(3))


class TestItemFit:
    def test_true_model_mean_squares_near_one(
        self, params: RatingScaleParameters, simulated
    ) -> None:
        data, theta = simulated
        fit = compute_item_fit(data, params, theta)

        np.testing.assert_array_equal(fit.n_observations, [2000, 2000, 2000])
        np.testing.assert_allclose(fit.infit, 1.0, atol=0.1)
        np.testing.assert_allclose(fit.outfit, 1.0, atol=0.15)

    def test_random_responses_misfit(
        self, params: RatingScaleParameters, simulated
    ) -> None:
        data, theta = simulated
        rng = get_rng(1)
        noisy = ResponseData(
            items=data.items,
            persons=data.persons,
            responses=rng.integers(0, 4, size=data.n_observations),
            n_categories=4,
            covariates=data.covariates,
        )
        fit = compute_item_fit(noisy, params, theta)

        assert np.all(fit.outfit > 1.2)
