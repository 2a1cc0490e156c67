"""
IRT (Item Response Theory) module for ordered rating categories.

This module provides:
- The category probability engine for the RSM and GRSM
- Sum-to-zero constraints and the parameter container
- Latent regression and the observation likelihood
- Sampling functions for generating ratings
- Estimation infrastructure and ability estimation
- Diagnostic utilities for model validation
"""

from ratingscale.irt.constraints import free_parameters, sum_to_zero
from ratingscale.irt.diagnostics import (
    CategoryComparison,
    ItemFit,
    compute_category_comparison,
    compute_item_fit,
)
from ratingscale.irt.estimation.estimator import RatingScaleEstimator
from ratingscale.irt.likelihood import log_likelihood
from ratingscale.irt.parameters import ModelKind, RatingScaleParameters
from ratingscale.irt.probabilities import (
    category_probabilities,
    category_probabilities_batch,
    rating_scale_probabilities,
)
from ratingscale.irt.sampling import (
    sample_person_responses,
    sample_response,
    sample_responses_batch,
)

__all__ = [
    "CategoryComparison",
    "ItemFit",
    "ModelKind",
    "RatingScaleEstimator",
    "RatingScaleParameters",
    "category_probabilities",
    "category_probabilities_batch",
    "compute_category_comparison",
    "compute_item_fit",
    "free_parameters",
    "log_likelihood",
    "rating_scale_probabilities",
    "sample_person_responses",
    "sample_response",
    "sample_responses_batch",
    "sum_to_zero",
]
