"""
Orchestration layer for synthetic rating data generation.

This module ties together covariates, abilities, generating parameters and
response sampling to generate complete rating datasets.
"""

from pathlib import Path

import numpy as np
import pandas as pd

from ratingscale.core.data import save_responses_csv
from ratingscale.core.data_models import ResponseData
from ratingscale.core.utils import get_rng
from ratingscale.irt.parameters import ModelKind
from ratingscale.irt.regression import person_means
from ratingscale.irt.sampling import sample_person_responses
from ratingscale.synthetic_data.config import GenerationConfig
from ratingscale.synthetic_data.data_models import GeneratedData
from ratingscale.synthetic_data.parameters import (
    sample_covariates,
    sample_parameters,
)
from ratingscale.synthetic_data.sampling import draw_sample


def generate_responses(config: GenerationConfig) -> GeneratedData:
    """
    Generate a synthetic rating dataset.

    This is the main entry point for the synthetic data generation pipeline.
    It orchestrates the full generation process:
        1. Sample the covariate matrix W (intercept in column 0)
        2. Sample generating parameters under the sum-to-zero constraints
        3. Sample person abilities
        4. Sample every person x item rating through the probability engine

    Abilities follow the model's formulation: θ = Wλ + σ z for the RSM and
    θ = z for the GRSM, where the regression enters the location instead.

    Args:
        config: Complete generation configuration.

    Returns:
        GeneratedData with the ratings and all generating values.
    """
    rng = get_rng(config.random_seed)

    # Step 1: Covariates
    covariates = sample_covariates(config, rng)

    # Step 2: Parameters
    params = sample_parameters(config, rng)

    # Step 3: Abilities
    z = draw_sample(
        n=config.n_persons,
        distribution_name=config.ability.distribution,
        distribution_params=dict(config.ability.params),
        rng=rng,
    )
    if params.model == ModelKind.RSM:
        abilities = person_means(covariates, params.regression) + (
            params.sigma * z
        )
    else:
        abilities = z

    # Step 4: Ratings
    matrix = sample_person_responses(params, abilities, covariates, rng)
    data = ResponseData.from_matrix(
        matrix, covariates=covariates, n_categories=config.n_categories
    )

    return GeneratedData(
        data=data,
        abilities=abilities.astype(np.float64),
        parameters=params,
        config=config,
    )


def to_dataframe(generated: GeneratedData) -> pd.DataFrame:
    """
    Convert GeneratedData to a long-format pandas DataFrame.

    Args:
        generated: Generated rating data.

    Returns:
        DataFrame with columns: person, item, response, ability.
    """
    data = generated.data
    return pd.DataFrame(
        {
            "person": data.persons,
            "item": data.items,
            "response": data.responses,
            "ability": generated.abilities[data.persons],
        }
    )


def to_csv(
    generated: GeneratedData,
    path: Path,
    covariates_path: Path | None = None,
) -> None:
    """
    Write GeneratedData to CSV files readable by load_responses_csv.

    Args:
        generated: Generated rating data.
        path: Output file for the ratings.
        covariates_path: Optional output file for the covariate matrix.
    """
    save_responses_csv(generated.data, path, covariates_path=covariates_path)
