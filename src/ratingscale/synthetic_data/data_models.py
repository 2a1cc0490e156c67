"""
Data structures for synthetic rating data generation.

This module defines typed data structures for the synthetic data module.
It avoids embedding generation logic - only contracts are defined here.
"""

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from ratingscale.core.data_models import ResponseData
from ratingscale.irt.parameters import RatingScaleParameters
from ratingscale.synthetic_data.config import GenerationConfig


@dataclass(frozen=True)
class GeneratedData:
    """
    Complete output from synthetic data generation.

    Contains the observed ratings and the generating values for recovery
    checks.
    """

    # Primary output
    data: ResponseData

    # Generating values
    abilities: NDArray[np.float64]
    parameters: RatingScaleParameters

    # Generation metadata
    config: GenerationConfig

    @property
    def covariates(self) -> NDArray[np.float64]:
        return self.data.design

    def category_frequencies(self) -> NDArray[np.float64]:
        """Share of all ratings falling in each category."""
        counts = np.bincount(
            self.data.responses, minlength=self.data.n_categories
        )
        result: NDArray[np.float64] = counts / counts.sum()
        return result
