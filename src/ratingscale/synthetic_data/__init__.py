"""
Synthetic data generation module for rating scale responses.

This module simulates ordered ratings from the RSM or GRSM with latent
regression, for parameter recovery studies and offline checks.

It is NOT intended for production inference.
"""

from ratingscale.synthetic_data.config import (
    DistributionConfig,
    GenerationConfig,
)
from ratingscale.synthetic_data.data_models import GeneratedData
from ratingscale.synthetic_data.generators import (
    generate_responses,
    to_csv,
    to_dataframe,
)
from ratingscale.synthetic_data.presets import get_available_presets, get_preset

__all__ = [
    "DistributionConfig",
    "GeneratedData",
    "GenerationConfig",
    "generate_responses",
    "get_available_presets",
    "get_preset",
    "to_csv",
    "to_dataframe",
]
