"""
Data models for rating scale estimation input.

This module defines ResponseData, the long-format representation of
observed ratings that both the in-package estimator and an external
sampler consume.
"""

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ratingscale.core.constants import MISSING_VALUE


@dataclass(frozen=True)
class ResponseData:
    """
    Observed ratings in long format, one entry per (person, item) pair.

    Attributes:
        items: 0-based item index of each observation, shape (N,).
        persons: 0-based person index of each observation, shape (N,).
        responses: Observed category (0..m) of each observation, shape (N,).
        n_categories: Number of response categories m+1 (same for all items).
        covariates: Person covariate matrix W, shape (J, K). Column 0 is
            conventionally the intercept. If None, an intercept-only design
            is used.
    """

    items: NDArray[np.int64]
    persons: NDArray[np.int64]
    responses: NDArray[np.int64]
    n_categories: int
    covariates: NDArray[np.float64] | None = None

    def __post_init__(self) -> None:
        """Validate response data."""
        for name in ("items", "persons", "responses"):
            arr = getattr(self, name)
            if arr.ndim != 1:
                raise ValueError(f"{name} must be 1D, got shape {arr.shape}")
        n_obs = len(self.responses)
        if n_obs == 0:
            raise ValueError("Need at least one observation")
        if len(self.items) != n_obs or len(self.persons) != n_obs:
            raise ValueError(
                f"items, persons and responses must have the same length, "
                f"got {len(self.items)}, {len(self.persons)} and {n_obs}"
            )
        if self.n_categories < 2:
            raise ValueError(
                f"n_categories must be >= 2, got {self.n_categories}"
            )
        if self.items.min() < 0 or self.persons.min() < 0:
            raise ValueError("Item and person indices must be >= 0")
        if self.responses.min() < 0:
            raise ValueError(
                f"Response values must be >= 0, got min {self.responses.min()}"
            )
        if self.responses.max() >= self.n_categories:
            raise ValueError(
                f"Response values must be < n_categories ({self.n_categories}), "
                f"got max {self.responses.max()}"
            )
        if self.covariates is not None:
            if self.covariates.ndim != 2:
                raise ValueError(
                    f"covariates must be 2D, got shape {self.covariates.shape}"
                )
            if self.covariates.shape[1] < 1:
                raise ValueError("covariates must have at least one column")
            if self.covariates.shape[0] <= self.persons.max():
                raise ValueError(
                    f"covariates has {self.covariates.shape[0]} rows but "
                    f"person index {self.persons.max()} is observed"
                )
            if not np.all(np.isfinite(self.covariates)):
                raise ValueError("covariates must contain only finite values")

    @property
    def n_items(self) -> int:
        """Number of items (I)."""
        return int(self.items.max()) + 1

    @property
    def n_persons(self) -> int:
        """Number of persons (J)."""
        if self.covariates is not None:
            return int(self.covariates.shape[0])
        return int(self.persons.max()) + 1

    @property
    def n_observations(self) -> int:
        """Number of observations (N)."""
        return len(self.responses)

    @property
    def max_category(self) -> int:
        """Highest response category (m)."""
        return self.n_categories - 1

    @property
    def design(self) -> NDArray[np.float64]:
        """Covariate matrix W, intercept-only if no covariates were given."""
        if self.covariates is None:
            return np.ones((self.n_persons, 1), dtype=np.float64)
        return self.covariates

    @property
    def n_covariates(self) -> int:
        """Number of covariate columns (K)."""
        return int(self.design.shape[1])

    def item_category_counts(self, item_idx: int) -> NDArray[np.int64]:
        """
        Count responses in each category for one item.

        Args:
            item_idx: Index of the item.

        Returns:
            Array of shape (n_categories,) with counts per category.
        """
        item_responses = self.responses[self.items == item_idx]
        counts = np.bincount(item_responses, minlength=self.n_categories)
        return counts.astype(np.int64)

    def to_matrix(self) -> NDArray[np.int64]:
        """
        Convert to a wide person x item matrix.

        Returns:
            Array of shape (n_persons, n_items). Unobserved cells hold
            MISSING_VALUE.
        """
        matrix = np.full(
            (self.n_persons, self.n_items), MISSING_VALUE, dtype=np.int64
        )
        matrix[self.persons, self.items] = self.responses
        return matrix

    def to_sampler_data(self) -> dict[str, Any]:
        """
        Assemble the data block an external sampler expects.

        Item and person indices are shifted to 1-based labels; responses
        stay on their natural 0..m scale.

        Returns:
            Dict with keys I, J, N, K, ii, jj, y, W.
        """
        return {
            "I": self.n_items,
            "J": self.n_persons,
            "N": self.n_observations,
            "K": self.n_covariates,
            "ii": (self.items + 1).tolist(),
            "jj": (self.persons + 1).tolist(),
            "y": self.responses.tolist(),
            "W": self.design.tolist(),
        }

    @classmethod
    def from_matrix(
        cls,
        matrix: ArrayLike,
        covariates: ArrayLike | None = None,
        n_categories: int | None = None,
    ) -> "ResponseData":
        """
        Build long-format data from a wide person x item matrix.

        Args:
            matrix: Responses, shape (n_persons, n_items). Cells equal to
                MISSING_VALUE are skipped.
            covariates: Optional covariate matrix, shape (n_persons, K).
            n_categories: Number of categories. Inferred from the largest
                observed response if None.

        Returns:
            ResponseData with one entry per observed cell.
        """
        wide = np.asarray(matrix, dtype=np.int64)
        if wide.ndim != 2:
            raise ValueError(f"matrix must be 2D, got shape {wide.shape}")

        persons, items = np.nonzero(wide != MISSING_VALUE)
        responses = wide[persons, items]

        if n_categories is None:
            if responses.size == 0:
                raise ValueError("Need at least one observation")
            n_categories = max(int(responses.max()) + 1, 2)

        if covariates is None:
            design = np.ones((wide.shape[0], 1), dtype=np.float64)
        else:
            design = np.asarray(covariates, dtype=np.float64)
            if design.ndim != 2 or design.shape[0] != wide.shape[0]:
                raise ValueError(
                    f"covariates must have shape ({wide.shape[0]}, K), "
                    f"got {design.shape}"
                )

        return cls(
            items=items.astype(np.int64),
            persons=persons.astype(np.int64),
            responses=responses.astype(np.int64),
            n_categories=n_categories,
            covariates=design,
        )
