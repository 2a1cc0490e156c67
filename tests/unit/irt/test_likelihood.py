import numpy as np
import pytest

from ratingscale.core.data_models import ResponseData
from ratingscale.irt.likelihood import (
    categorical_log_pmf,
    check_compatible,
    from_categorical_label,
    log_likelihood,
    observation_log_likelihood,
    to_categorical_label,
)
from ratingscale.irt.parameters import ModelKind, RatingScaleParameters
from ratingscale.irt.probabilities import category_probabilities


@pytest.fixture
def data() -> ResponseData:
    return ResponseData(
        items=np.array([0, 1, 0, 1], dtype=np.int64),
        persons=np.array([0, 0, 1, 1], dtype=np.int64),
        responses=np.array([0, 2, 1, 3], dtype=np.int64),
        n_categories=4,
    )


@pytest.fixture
def params() -> RatingScaleParameters:
    return RatingScaleParameters(
        difficulties=(-0.3, 0.3),
        steps=(-1.0, 0.2, 0.8),
        regression=(0.5,),
        discriminations=(0.7, 1.4),
    )


class TestCategoricalLabels:
    def test_shift(self) -> None:
        np.testing.assert_array_equal(to_categorical_label([0, 1, 3]), [1, 2, 4])
        np.testing.assert_array_equal(
            from_categorical_label(to_categorical_label([0, 2])), [0, 2]
        )

    def test_log_pmf_uses_one_indexed_labels(self) -> None:
        probs = np.array([[0.2, 0.8], [0.6, 0.4]])

        np.testing.assert_allclose(
            categorical_log_pmf([2, 1], probs), np.log([0.8, 0.6])
        )

    def test_log_pmf_rejects_zero_label(self) -> None:
        with pytest.raises(ValueError, match="labels"):
            categorical_log_pmf([0], np.array([[0.5, 0.5]]))

    def test_log_pmf_shape_mismatch(self) -> None:
        with pytest.raises(ValueError, match="shape"):
            categorical_log_pmf([1, 1], np.array([[0.5, 0.5]]))

    def test_engine_probabilities_through_labels(self) -> None:
        """Categories shifted to labels select the same probability."""
        probs = category_probabilities(0.4, 0.1, [-1.0, 0.0, 1.0])[np.newaxis]
        for y in range(4):
            logp = categorical_log_pmf(to_categorical_label([y]), probs)
            np.testing.assert_allclose(logp, np.log(probs[0, y]))


class TestObservationLogLikelihood:
    def test_matches_direct_computation(
        self, data: ResponseData, params: RatingScaleParameters
    ) -> None:
        theta = np.array([-0.4, 1.1])
        result = observation_log_likelihood(params, data, theta)

        expected = []
        for i, j, y in zip(data.items, data.persons, data.responses):
            probs = category_probabilities(
                theta[j] + 0.5,
                params.difficulties[i],
                params.steps,
                params.discriminations[i],
            )
            expected.append(np.log(probs[y]))
        np.testing.assert_allclose(result, expected, rtol=1e-10)
        assert log_likelihood(params, data, theta) == pytest.approx(
            sum(expected)
        )

    def test_ability_shape(
        self, data: ResponseData, params: RatingScaleParameters
    ) -> None:
        with pytest.raises(ValueError, match="abilities"):
            observation_log_likelihood(params, data, np.zeros(3))

    def test_category_mismatch(self, data: ResponseData) -> None:
        params = RatingScaleParameters(difficulties=(0.0, 0.0), steps=(0.0,))

        with pytest.raises(ValueError, match="categories"):
            observation_log_likelihood(params, data, np.zeros(2))

    def test_too_many_items(self, data: ResponseData) -> None:
        params = RatingScaleParameters(
            difficulties=(0.0,), steps=(-1.0, 0.2, 0.8)
        )

        with pytest.raises(ValueError, match="items"):
            observation_log_likelihood(params, data, np.zeros(2))


class TestCheckCompatible:
    def test_matching_parameters_pass(
        self, data: ResponseData, params: RatingScaleParameters
    ) -> None:
        check_compatible(data, params)

    def test_extra_items_allowed(self, data: ResponseData) -> None:
        params = RatingScaleParameters.create_default(ModelKind.GRSM, 4, 4)

        check_compatible(data, params)

    def test_covariate_mismatch(self, data: ResponseData) -> None:
        params = RatingScaleParameters.create_default(
            ModelKind.RSM, 2, 4, n_covariates=3
        )

        with pytest.raises(ValueError, match="covariates"):
            check_compatible(data, params)
