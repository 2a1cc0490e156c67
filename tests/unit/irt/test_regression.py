import numpy as np
import pytest

from ratingscale.irt.regression import (
    intercept_only_design,
    person_locations,
    person_means,
)


class TestPersonMeans:
    def test_matrix_product(self) -> None:
        w = np.array([[1.0, 0.5], [1.0, -1.0], [1.0, 2.0]])
        lam = np.array([0.3, 0.2])

        np.testing.assert_allclose(person_means(w, lam), [0.4, 0.1, 0.7])

    def test_intercept_only(self) -> None:
        mu = person_means(intercept_only_design(4), [1.5])

        np.testing.assert_allclose(mu, [1.5] * 4)

    def test_coefficient_mismatch(self) -> None:
        with pytest.raises(ValueError, match="regression coefficients"):
            person_means(np.ones((3, 2)), [1.0])

    def test_covariates_must_be_2d(self) -> None:
        with pytest.raises(ValueError, match="2D"):
            person_means(np.ones(3), [1.0])


class TestPersonLocations:
    def test_without_regression_returns_abilities(self) -> None:
        theta = np.array([0.1, -0.2])

        np.testing.assert_array_equal(person_locations(theta), theta)

    def test_adds_regression_mean(self) -> None:
        theta = np.array([0.1, -0.2])
        w = np.array([[1.0, 1.0], [1.0, 0.0]])

        np.testing.assert_allclose(
            person_locations(theta, w, [0.5, 1.0]), [1.6, 0.3]
        )

    def test_partial_arguments_raise(self) -> None:
        with pytest.raises(ValueError, match="together"):
            person_locations([0.0], covariates=np.ones((1, 1)))

    def test_row_mismatch_raises(self) -> None:
        with pytest.raises(ValueError, match="does not match"):
            person_locations([0.0, 1.0], np.ones((3, 1)), [0.0])

    def test_empty_design_rejected(self) -> None:
        with pytest.raises(ValueError):
            intercept_only_design(0)
