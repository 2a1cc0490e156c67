import pytest

from ratingscale.irt.estimation.config import (
    ConvergenceConfig,
    EstimationConfig,
    ParameterBounds,
    PenaltyConfig,
    QuadratureConfig,
)


class TestEstimationConfig:
    def test_defaults(self) -> None:
        config = EstimationConfig()

        assert config.quadrature.n_points == 41
        assert config.convergence.em_tolerance == 1e-6
        assert config.penalty.lambda_penalty == 0.01
        assert config.model_version

    def test_model_version_from_pyproject(self) -> None:
        assert EstimationConfig().model_version == "0.1.0"

    def test_frozen(self) -> None:
        config = QuadratureConfig()

        with pytest.raises(AttributeError):
            config.n_points = 3  # type: ignore[misc]


class TestValidation:
    def test_quadrature(self) -> None:
        with pytest.raises(ValueError, match="n_points"):
            QuadratureConfig(n_points=0)
        with pytest.raises(ValueError, match="std"):
            QuadratureConfig(std=-1.0)

    def test_convergence(self) -> None:
        with pytest.raises(ValueError, match="Iteration limits"):
            ConvergenceConfig(max_em_iterations=0)
        with pytest.raises(ValueError, match="Tolerances"):
            ConvergenceConfig(em_tolerance=0.0)

    def test_penalty(self) -> None:
        with pytest.raises(ValueError, match="lambda_penalty"):
            PenaltyConfig(lambda_penalty=-0.1)

    def test_bounds(self) -> None:
        with pytest.raises(ValueError, match="log_sigma bounds"):
            ParameterBounds(log_sigma=(1.0, -1.0))
