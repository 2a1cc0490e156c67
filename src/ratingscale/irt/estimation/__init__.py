"""
Rating scale model estimation module.

This module provides infrastructure for estimating rating scale models
using Marginal Maximum Likelihood via the EM algorithm.

Key components:
- EstimationConfig: Configuration for estimation
- RatingScaleEstimator: RSM / GRSM estimator with latent regression
- EstimationResult: Output from estimation
- estimate_abilities: EAP ability estimation
"""

from ratingscale.irt.estimation.abilities import (
    AbilityEstimates,
    estimate_abilities,
)
from ratingscale.irt.estimation.config import EstimationConfig
from ratingscale.irt.estimation.data_models import EstimationResult
from ratingscale.irt.estimation.enums import ConvergenceStatus
from ratingscale.irt.estimation.estimator import RatingScaleEstimator

__all__ = [
    "AbilityEstimates",
    "ConvergenceStatus",
    "EstimationConfig",
    "EstimationResult",
    "RatingScaleEstimator",
    "estimate_abilities",
]
