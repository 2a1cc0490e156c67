from dataclasses import dataclass, field

from omegaconf import MISSING

MODEL_NAMES = ("rsm", "grsm")


@dataclass
class DistributionConfig:
    """Configuration for a single parameter's marginal distribution.

    Attributes:
        distribution: Registered distribution name ("normal", "uniform",
            "log_normal", "constant", ...)
        params: Distribution parameters (mean, std, lower, upper, etc.)
    """

    distribution: str = MISSING
    params: dict[str, float | None] = MISSING


def _default_ability() -> DistributionConfig:
    """Standardized person residual z; θ = w'λ + σ z."""
    return DistributionConfig(
        distribution="normal", params={"mean": 0.0, "std": 1.0}
    )


def _default_difficulty() -> DistributionConfig:
    return DistributionConfig(
        distribution="normal", params={"mean": 0.0, "std": 1.0}
    )


def _default_step() -> DistributionConfig:
    return DistributionConfig(
        distribution="uniform", params={"low": -1.5, "high": 1.5}
    )


def _default_discrimination() -> DistributionConfig:
    return DistributionConfig(
        distribution="log_normal", params={"mean": 1.0, "std": 0.3}
    )


def _default_covariate() -> DistributionConfig:
    """Distribution of non-intercept covariate columns."""
    return DistributionConfig(
        distribution="normal", params={"mean": 0.0, "std": 1.0}
    )


@dataclass
class GenerationConfig:
    """Complete configuration for generating a synthetic rating dataset.

    Attributes:
        n_persons: Number of persons (J).
        n_items: Number of items (I).
        n_categories: Number of response categories (m + 1).
        model: "rsm" or "grsm".
        n_covariates: Number of covariate columns (K), intercept included.
        random_seed: Seed for reproducibility.
        ability: Distribution of the standardized person residual.
        difficulty: Distribution of the free item difficulties.
        step: Distribution of the free step difficulties.
        discrimination: Distribution of item discriminations (GRSM only).
        covariate: Distribution of non-intercept covariate values.
        regression: Regression coefficients λ, one per covariate.
        sigma: Ability scale. Fixed at 1 for the GRSM.
        sort_steps: Sort step difficulties ascending (ordered thresholds).
    """

    n_persons: int
    n_items: int
    n_categories: int

    model: str = "rsm"
    n_covariates: int = 1

    # Reproducibility
    random_seed: int = MISSING

    ability: DistributionConfig = field(default_factory=_default_ability)
    difficulty: DistributionConfig = field(default_factory=_default_difficulty)
    step: DistributionConfig = field(default_factory=_default_step)
    discrimination: DistributionConfig = field(
        default_factory=_default_discrimination
    )
    covariate: DistributionConfig = field(default_factory=_default_covariate)

    regression: list[float] = field(default_factory=lambda: [0.0])
    sigma: float = 1.0
    sort_steps: bool = True

    def __post_init__(self) -> None:
        if self.n_persons <= 1:
            raise ValueError("Must have at least 2 persons")
        if self.n_items <= 0:
            raise ValueError("Must have at least 1 item")
        if self.n_categories < 2:
            raise ValueError("Must have at least 2 response categories")
        if self.model not in MODEL_NAMES:
            raise ValueError(
                f"model must be one of {MODEL_NAMES}, got {self.model}"
            )
        if self.n_covariates < 1:
            raise ValueError("Must have at least 1 covariate (the intercept)")
        if len(self.regression) != self.n_covariates:
            raise ValueError(
                f"Expected {self.n_covariates} regression coefficients, "
                f"got {len(self.regression)}"
            )
        if self.sigma <= 0:
            raise ValueError(f"sigma must be positive, got {self.sigma}")
        if self.model == "grsm" and self.sigma != 1.0:
            raise ValueError("sigma is fixed at 1 for the grsm")
