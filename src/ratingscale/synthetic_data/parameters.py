"""
Generating parameter sampling for synthetic rating data.

This module provides:
- Distribution creation from configuration via the sampling registry
- Sampling of item, step and regression parameters under the sum-to-zero
  identification constraints
- Sampling of the person covariate matrix
- Config loading from YAML files using OmegaConf
"""

from pathlib import Path

import numpy as np
from numpy.random import Generator
from numpy.typing import NDArray
from omegaconf import OmegaConf

from ratingscale.irt.constraints import sum_to_zero
from ratingscale.irt.parameters import RatingScaleParameters
from ratingscale.synthetic_data.config import (
    DistributionConfig,
    GenerationConfig,
)
from ratingscale.synthetic_data.sampling import Distribution, registry


def create_distribution(config: DistributionConfig) -> Distribution:
    """Create a Distribution from configuration using the distribution registry.

    Args:
        config: Distribution configuration

    Returns:
        Distribution object that supports .sample() and .cdf()

    Raises:
        ValueError: If distribution type is unknown
    """
    return registry.get_sampler(
        name=config.distribution,
        params=dict(config.params),
    )


def _draw(
    config: DistributionConfig, n: int, rng: Generator
) -> NDArray[np.float64]:
    return create_distribution(config).sample(n, rng)


def sample_parameters(
    config: GenerationConfig, rng: Generator
) -> RatingScaleParameters:
    """Draw generating parameters.

    The first I-1 difficulties and m-1 steps are drawn from their
    configured distributions; the last of each is derived so that the set
    sums to zero. Discriminations are drawn for the GRSM only.

    Args:
        config: Generation configuration.
        rng: Random number generator.

    Returns:
        RatingScaleParameters satisfying all constraints.
    """
    difficulties = sum_to_zero(
        _draw(config.difficulty, config.n_items - 1, rng)
    )

    steps = sum_to_zero(_draw(config.step, config.n_categories - 2, rng))
    if config.sort_steps:
        steps = np.sort(steps)

    discriminations = None
    if config.model == "grsm":
        alphas = _draw(config.discrimination, config.n_items, rng)
        if np.any(alphas <= 0):
            raise ValueError(
                "Discrimination distribution produced non-positive values"
            )
        discriminations = tuple(float(a) for a in alphas)

    return RatingScaleParameters(
        difficulties=tuple(float(b) for b in difficulties),
        steps=tuple(float(k) for k in steps),
        regression=tuple(float(x) for x in config.regression),
        sigma=config.sigma,
        discriminations=discriminations,
    )


def sample_covariates(
    config: GenerationConfig, rng: Generator
) -> NDArray[np.float64]:
    """Draw the covariate matrix W.

    Column 0 is the intercept (all ones); the remaining K-1 columns are
    drawn from the configured covariate distribution.

    Returns:
        Array of shape (n_persons, n_covariates).
    """
    design = np.ones((config.n_persons, config.n_covariates), dtype=np.float64)
    n_extra = config.n_covariates - 1
    if n_extra > 0:
        values = _draw(config.covariate, config.n_persons * n_extra, rng)
        design[:, 1:] = values.reshape(config.n_persons, n_extra)
    return design


# =============================================================================
# Config Loading
# =============================================================================


def load_config(yaml_path: Path) -> GenerationConfig:
    """Load and validate parameters from YAML.

    Args:
        yaml_path: Path to YAML config file

    Returns:
        Validated GenerationConfig

    Raises:
        ValueError: If the configuration is inconsistent
        FileNotFoundError: If yaml_path doesn't exist
    """
    # Create schema from dataclass
    schema = OmegaConf.structured(GenerationConfig)

    if not yaml_path.exists():
        raise FileNotFoundError(f"Config file not found: {yaml_path}")

    user_config = OmegaConf.load(yaml_path)
    config = OmegaConf.merge(schema, user_config)

    # Convert to typed dataclass
    result = OmegaConf.to_object(config)
    assert isinstance(result, GenerationConfig)

    return result
