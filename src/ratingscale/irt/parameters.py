"""
Parameter representation for the rating scale model family.

Two models share one container:
    - RSM: α_i = 1, θ_j ~ N(w_j'λ, σ²), location L_j = θ_j.
    - GRSM: α_i > 0 free, θ_j ~ N(0, 1), location L_j = θ_j + w_j'λ.

Identification: item difficulties β and step difficulties κ each sum to zero.
Free parameter vector layout:
    [β_0..β_{I-2}, κ_1..κ_{m-1}, λ_0..λ_{K-1}, log σ]       (RSM)
    [β_0..β_{I-2}, κ_1..κ_{m-1}, λ_0..λ_{K-1}, log α_0..log α_{I-1}]  (GRSM)
The last β and the last κ are derived as the negated sum of the others.
"""

from enum import Enum
from typing import Self

import numpy as np
from numpy.typing import ArrayLike, NDArray
from pydantic import BaseModel, ConfigDict, model_validator

from ratingscale.core.constants import SUM_TO_ZERO_ATOL
from ratingscale.core.errors import InvalidParameterError
from ratingscale.irt.constraints import check_sum_to_zero, sum_to_zero
from ratingscale.irt.probabilities import category_probabilities_batch
from ratingscale.irt.regression import intercept_only_design, person_means


class ModelKind(str, Enum):
    RSM = "rsm"
    GRSM = "grsm"


def _all_finite(values: tuple[float, ...]) -> bool:
    return bool(np.all(np.isfinite(np.asarray(values, dtype=np.float64))))


class RatingScaleParameters(BaseModel):
    """
    Parameters of a (generalized) rating scale model with latent regression.

    Attributes:
        difficulties: Item difficulties β, one per item, summing to zero.
        steps: Step difficulties κ_1..κ_m shared by all items, summing to
            zero. m = n_categories - 1.
        regression: Latent regression coefficients λ, one per covariate.
        sigma: Ability standard deviation. Free for the RSM; fixed at 1 for
            the GRSM.
        discriminations: Item discriminations α (GRSM), or None (RSM).
    """

    model_config = ConfigDict(frozen=True)

    difficulties: tuple[float, ...]
    steps: tuple[float, ...]
    regression: tuple[float, ...] = (0.0,)
    sigma: float = 1.0
    discriminations: tuple[float, ...] | None = None

    @model_validator(mode="after")
    def _validate_difficulties(self) -> "RatingScaleParameters":
        if len(self.difficulties) < 1:
            raise InvalidParameterError("Need at least one item difficulty")
        if not _all_finite(self.difficulties):
            raise InvalidParameterError(
                f"difficulties must be finite, got {self.difficulties}"
            )
        check_sum_to_zero(self.difficulties, "difficulties", SUM_TO_ZERO_ATOL)
        return self

    @model_validator(mode="after")
    def _validate_steps(self) -> "RatingScaleParameters":
        if len(self.steps) < 1:
            raise InvalidParameterError(
                "Need at least one step difficulty (two categories)"
            )
        if not _all_finite(self.steps):
            raise InvalidParameterError(
                f"steps must be finite, got {self.steps}"
            )
        check_sum_to_zero(self.steps, "steps", SUM_TO_ZERO_ATOL)
        return self

    @model_validator(mode="after")
    def _validate_regression(self) -> "RatingScaleParameters":
        if len(self.regression) < 1:
            raise InvalidParameterError(
                "Need at least one regression coefficient"
            )
        if not _all_finite(self.regression):
            raise InvalidParameterError(
                f"regression must be finite, got {self.regression}"
            )
        return self

    @model_validator(mode="after")
    def _validate_scale(self) -> "RatingScaleParameters":
        if not np.isfinite(self.sigma) or self.sigma <= 0:
            raise InvalidParameterError(
                f"sigma must be positive and finite, got {self.sigma}"
            )
        if self.discriminations is None:
            return self
        if len(self.discriminations) != len(self.difficulties):
            raise InvalidParameterError(
                f"Expected {len(self.difficulties)} discriminations, "
                f"got {len(self.discriminations)}"
            )
        if not _all_finite(self.discriminations) or any(
            a <= 0 for a in self.discriminations
        ):
            raise InvalidParameterError(
                f"Discriminations must be positive and finite, "
                f"got {self.discriminations}"
            )
        if self.sigma != 1.0:
            raise InvalidParameterError(
                f"sigma is fixed at 1 for the GRSM, got {self.sigma}"
            )
        return self

    @property
    def model(self) -> ModelKind:
        """Which model these parameters belong to."""
        if self.discriminations is None:
            return ModelKind.RSM
        return ModelKind.GRSM

    @property
    def n_items(self) -> int:
        return len(self.difficulties)

    @property
    def n_categories(self) -> int:
        """Number of response categories (m + 1)."""
        return len(self.steps) + 1

    @property
    def n_covariates(self) -> int:
        return len(self.regression)

    def item_discriminations(self) -> NDArray[np.float64]:
        """Discrimination per item; ones for the RSM."""
        if self.discriminations is None:
            return np.ones(self.n_items, dtype=np.float64)
        return np.array(self.discriminations, dtype=np.float64)

    def locations(
        self,
        abilities: ArrayLike,
        covariates: ArrayLike | None = None,
    ) -> NDArray[np.float64]:
        """
        Effective locations L_j for the given abilities.

        For the RSM the regression lives in the ability prior mean, so
        L_j = θ_j. For the GRSM L_j = θ_j + w_j'λ, with an intercept-only
        design if covariates is None.

        Args:
            abilities: Person abilities θ, shape (J,).
            covariates: Covariate matrix W, shape (J, K), or None.

        Returns:
            Locations, shape (J,).
        """
        theta = np.asarray(abilities, dtype=np.float64)
        if self.model == ModelKind.RSM:
            return theta.copy()
        if covariates is None:
            covariates = intercept_only_design(len(theta))
        result: NDArray[np.float64] = theta + person_means(
            covariates, self.regression
        )
        return result

    def item_probabilities(
        self, item: int, locations: ArrayLike
    ) -> NDArray[np.float64]:
        """
        Category probabilities of one item at many locations.

        Args:
            item: Item index.
            locations: Effective locations, shape (n,).

        Returns:
            Probabilities, shape (n, n_categories).
        """
        if not 0 <= item < self.n_items:
            raise IndexError(
                f"item must be in [0, {self.n_items}), got {item}"
            )
        loc = np.atleast_1d(np.asarray(locations, dtype=np.float64))
        return category_probabilities_batch(
            loc,
            self.difficulties[item],
            self.steps,
            self.item_discriminations()[item],
        )

    def to_array(self) -> NDArray[np.float64]:
        """
        Flatten free parameters to a 1D array for optimization.

        Returns:
            1D array of length n_free_parameters(...).
        """
        parts = [
            np.array(self.difficulties[:-1], dtype=np.float64),
            np.array(self.steps[:-1], dtype=np.float64),
            np.array(self.regression, dtype=np.float64),
        ]
        if self.model == ModelKind.RSM:
            parts.append(np.array([np.log(self.sigma)]))
        else:
            parts.append(np.log(self.item_discriminations()))
        return np.concatenate(parts)

    @classmethod
    def from_array(
        cls,
        arr: NDArray[np.float64],
        model: ModelKind,
        n_items: int,
        n_categories: int,
        n_covariates: int,
    ) -> Self:
        """
        Reconstruct parameters from a flattened array.

        The last difficulty and last step are derived from the sum-to-zero
        constraint.

        Args:
            arr: 1D array of free parameters from to_array().
            model: Model kind the array belongs to.
            n_items: Number of items (I).
            n_categories: Number of response categories (m + 1).
            n_covariates: Number of regression coefficients (K).

        Returns:
            RatingScaleParameters instance.
        """
        expected = cls.n_free_parameters(
            model, n_items, n_categories, n_covariates
        )
        arr = np.asarray(arr, dtype=np.float64)
        if arr.shape != (expected,):
            raise InvalidParameterError(
                f"Expected {expected} free parameters, got shape {arr.shape}"
            )

        pos = 0
        free_beta = arr[pos : pos + n_items - 1]
        pos += n_items - 1
        free_kappa = arr[pos : pos + n_categories - 2]
        pos += n_categories - 2
        regression = arr[pos : pos + n_covariates]
        pos += n_covariates

        if model == ModelKind.RSM:
            sigma = float(np.exp(arr[pos]))
            discriminations = None
        else:
            sigma = 1.0
            discriminations = tuple(float(a) for a in np.exp(arr[pos:]))

        return cls(
            difficulties=tuple(float(b) for b in sum_to_zero(free_beta)),
            steps=tuple(float(k) for k in sum_to_zero(free_kappa)),
            regression=tuple(float(x) for x in regression),
            sigma=sigma,
            discriminations=discriminations,
        )

    @classmethod
    def n_free_parameters(
        cls,
        model: ModelKind,
        n_items: int,
        n_categories: int,
        n_covariates: int,
    ) -> int:
        """
        Length of the free parameter vector.

        (I-1) difficulties + (m-1) steps + K coefficients, plus log σ for
        the RSM or I log-discriminations for the GRSM.
        """
        n_scale = 1 if model == ModelKind.RSM else n_items
        return (n_items - 1) + (n_categories - 2) + n_covariates + n_scale

    @classmethod
    def create_default(
        cls,
        model: ModelKind,
        n_items: int,
        n_categories: int,
        n_covariates: int = 1,
    ) -> Self:
        """
        Create neutral parameters: zero difficulties, steps and regression,
        unit σ and unit discriminations.
        """
        if n_categories < 2:
            raise InvalidParameterError(
                f"n_categories must be >= 2, got {n_categories}"
            )
        discriminations = (
            tuple(1.0 for _ in range(n_items))
            if model == ModelKind.GRSM
            else None
        )
        return cls(
            difficulties=tuple(0.0 for _ in range(n_items)),
            steps=tuple(0.0 for _ in range(n_categories - 1)),
            regression=tuple(0.0 for _ in range(n_covariates)),
            sigma=1.0,
            discriminations=discriminations,
        )
