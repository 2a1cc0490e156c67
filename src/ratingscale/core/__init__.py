"""
Core shared types and utilities.

This module provides foundational components used across multiple submodules:
the response data schema, CSV I/O, the error taxonomy and RNG helpers.
"""

from ratingscale.core.data_models import ResponseData
from ratingscale.core.errors import InvalidParameterError
from ratingscale.core.utils import get_rng

__all__ = [
    "InvalidParameterError",
    "ResponseData",
    "get_rng",
]
