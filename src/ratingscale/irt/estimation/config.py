"""
Configuration dataclasses for rating scale model estimation.

This module defines the configuration parameters for:
- Quadrature settings (Gauss-Hermite integration)
- Convergence criteria for EM algorithm
- Parameter bounds and the discrimination penalty
- Overall estimation settings
"""

from dataclasses import dataclass, field
from importlib import metadata

import toml

from ratingscale.core.paths import ProjectRootNotFound, get_project_root_dir

# Default parameter bounds
DEFAULT_DIFFICULTY_BOUNDS = (-10.0, 10.0)
DEFAULT_STEP_BOUNDS = (-10.0, 10.0)
DEFAULT_REGRESSION_BOUNDS = (-10.0, 10.0)
# Log scale: sigma and alpha in roughly [0.05, 12]
DEFAULT_LOG_SIGMA_BOUNDS = (-3.0, 2.5)
DEFAULT_LOG_DISCRIMINATION_BOUNDS = (-3.0, 2.5)

# Ridge penalty weight on log discriminations (GRSM)
DEFAULT_PENALTY_LAMBDA = 0.01

# Default convergence settings
DEFAULT_MAX_EM_ITERATIONS = 500
DEFAULT_EM_TOLERANCE = 1e-6
DEFAULT_MAX_LBFGS_ITERATIONS = 100
DEFAULT_LBFGS_TOLERANCE = 1e-6

# Default quadrature settings
DEFAULT_QUADRATURE_POINTS = 41


def _get_project_version() -> str:
    try:
        root_dir = get_project_root_dir()
    except ProjectRootNotFound:
        # Installed without the source tree
        return metadata.version("ratingscale")
    with open(root_dir / "pyproject.toml") as f:
        data = toml.load(f)

    version = data.get("project", {}).get("version")

    if not version:
        raise ValueError("Version not found in pyproject.toml")

    assert isinstance(version, str)
    return version


@dataclass(frozen=True)
class QuadratureConfig:
    """
    Configuration for Gauss-Hermite quadrature.

    Attributes:
        n_points: Number of quadrature points. Standard in IRT software
            (IRTPRO, flexMIRT) is 41 points.
        mean: Mean of the integration distribution (typically 0).
        std: Standard deviation of the integration distribution (typically 1).
            The estimator integrates over standardized nodes z and maps them
            to person locations through the latent regression.
    """

    n_points: int = DEFAULT_QUADRATURE_POINTS
    mean: float = 0.0
    std: float = 1.0

    def __post_init__(self) -> None:
        if self.n_points < 1:
            raise ValueError(f"n_points must be >= 1, got {self.n_points}")
        if self.std <= 0:
            raise ValueError(f"std must be positive, got {self.std}")


@dataclass(frozen=True)
class ConvergenceConfig:
    """
    Configuration for EM algorithm convergence.

    Attributes:
        max_em_iterations: Maximum number of EM iterations.
        em_tolerance: Convergence tolerance for log-likelihood change.
            EM stops when |LL_new - LL_old| / |LL_old| < tolerance.
        max_lbfgs_iterations: Maximum iterations for L-BFGS-B in M-step.
        lbfgs_tolerance: Convergence tolerance for L-BFGS-B optimizer.
    """

    max_em_iterations: int = DEFAULT_MAX_EM_ITERATIONS
    em_tolerance: float = DEFAULT_EM_TOLERANCE
    max_lbfgs_iterations: int = DEFAULT_MAX_LBFGS_ITERATIONS
    lbfgs_tolerance: float = DEFAULT_LBFGS_TOLERANCE

    def __post_init__(self) -> None:
        if self.max_em_iterations < 1 or self.max_lbfgs_iterations < 1:
            raise ValueError("Iteration limits must be >= 1")
        if self.em_tolerance <= 0 or self.lbfgs_tolerance <= 0:
            raise ValueError("Tolerances must be positive")


@dataclass(frozen=True)
class PenaltyConfig:
    """
    Configuration for the log-discrimination ridge penalty (GRSM only).

    Adds λ * Σ_i (log α_i)² to the M-step objective.

    Attributes:
        lambda_penalty: Penalty weight. 0 disables the penalty.
    """

    lambda_penalty: float = DEFAULT_PENALTY_LAMBDA

    def __post_init__(self) -> None:
        if self.lambda_penalty < 0:
            raise ValueError(
                f"lambda_penalty must be >= 0, got {self.lambda_penalty}"
            )


@dataclass(frozen=True)
class ParameterBounds:
    """
    Bounds for free parameters during optimization.

    Attributes:
        difficulty: (min, max) bounds for free item difficulties.
        step: (min, max) bounds for free step difficulties.
        regression: (min, max) bounds for regression coefficients.
        log_sigma: (min, max) bounds for log σ (RSM).
        log_discrimination: (min, max) bounds for log α (GRSM).
    """

    difficulty: tuple[float, float] = DEFAULT_DIFFICULTY_BOUNDS
    step: tuple[float, float] = DEFAULT_STEP_BOUNDS
    regression: tuple[float, float] = DEFAULT_REGRESSION_BOUNDS
    log_sigma: tuple[float, float] = DEFAULT_LOG_SIGMA_BOUNDS
    log_discrimination: tuple[float, float] = DEFAULT_LOG_DISCRIMINATION_BOUNDS

    def __post_init__(self) -> None:
        for name in (
            "difficulty",
            "step",
            "regression",
            "log_sigma",
            "log_discrimination",
        ):
            low, high = getattr(self, name)
            if not low < high:
                raise ValueError(
                    f"{name} bounds must satisfy lower < upper, "
                    f"got ({low}, {high})"
                )


@dataclass(frozen=True)
class EstimationConfig:
    """
    Master configuration for rating scale model estimation.

    Attributes:
        quadrature: Settings for Gauss-Hermite quadrature.
        convergence: Convergence criteria for EM algorithm.
        bounds: Parameter bounds for optimization.
        penalty: Settings for the log-discrimination penalty.
        model_version: Version string for reproducibility tracking.
    """

    quadrature: QuadratureConfig = QuadratureConfig()
    convergence: ConvergenceConfig = ConvergenceConfig()
    bounds: ParameterBounds = ParameterBounds()
    penalty: PenaltyConfig = PenaltyConfig()
    model_version: str = field(default_factory=_get_project_version)
