"""
Named distributions for drawing generating values.

Simulation configs refer to distributions by name ("normal", "log_normal",
...) with a dict of keyword parameters. The registry below turns such a pair
into a Distribution that draws with a numpy Generator. Most entries wrap a
frozen scipy.stats distribution; "constant" and "bimodal" are built here.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

import numpy as np
from numpy.random import Generator
from numpy.typing import NDArray
from scipy import stats

from ratingscale.core.utils import get_rng


class FrozenRV(Protocol):
    def cdf(self, x: Any) -> NDArray[np.floating[Any]]: ...
    def rvs(
        self, size: Any, random_state: Any
    ) -> NDArray[np.floating[Any]]: ...


class Distribution(ABC):
    """A univariate distribution that generating values are drawn from."""

    @abstractmethod
    def sample(self, n: int, rng: Generator) -> NDArray[np.float64]:
        """Draw n values, shape (n,)."""
        ...

    @abstractmethod
    def cdf(self, x: float) -> float:
        """P(X <= x)."""
        ...


@dataclass
class ScipyDistribution(Distribution):
    """A frozen scipy.stats distribution, e.g. stats.norm(loc=0, scale=1)."""

    dist: FrozenRV

    def sample(self, n: int, rng: Generator) -> NDArray[np.float64]:
        samples: NDArray[np.float64] = np.asarray(
            self.dist.rvs(size=n, random_state=rng), dtype=np.float64
        )
        return samples

    def cdf(self, x: float) -> float:
        return float(self.dist.cdf(x))


@dataclass
class MixtureDistribution(Distribution):
    """
    Finite mixture; each draw picks a component with the given weights.

    Used for person populations that are not unimodal, e.g. two groups of
    raters with different leniency.
    """

    components: list[Distribution]
    weights: list[float]

    def __post_init__(self) -> None:
        if len(self.components) != len(self.weights):
            raise ValueError(
                "Number of components must match number of weights"
            )
        if any(w < 0 for w in self.weights):
            raise ValueError("Weights must be non-negative")
        if abs(sum(self.weights) - 1.0) > 1e-6:
            raise ValueError(f"Weights must sum to 1, got {sum(self.weights)}")

    def sample(self, n: int, rng: Generator) -> NDArray[np.float64]:
        labels = rng.choice(len(self.components), size=n, p=self.weights)
        values = np.empty(n, dtype=np.float64)
        for k, component in enumerate(self.components):
            mask = labels == k
            if mask.any():
                values[mask] = component.sample(int(mask.sum()), rng)
        return values

    def cdf(self, x: float) -> float:
        return float(
            sum(
                w * comp.cdf(x)
                for w, comp in zip(self.weights, self.components, strict=True)
            )
        )


@dataclass
class PointMass(Distribution):
    """All draws equal value."""

    value: float

    def sample(self, n: int, rng: Generator) -> NDArray[np.float64]:
        return np.full(n, self.value, dtype=np.float64)

    def cdf(self, x: float) -> float:
        return 1.0 if x >= self.value else 0.0


####################################################################
# Registry
####################################################################


DistributionFactory = Callable[..., Distribution]


class SamplerRegistry:
    """Maps distribution names to factories taking keyword parameters."""

    def __init__(self) -> None:
        self._factories: dict[str, DistributionFactory] = {}

    def register(
        self, name: str
    ) -> Callable[[DistributionFactory], DistributionFactory]:
        def decorator(func: DistributionFactory) -> DistributionFactory:
            self._factories[name] = func
            return func

        return decorator

    @property
    def names(self) -> list[str]:
        return sorted(self._factories)

    def get_sampler(
        self, name: str, params: dict[str, float | None]
    ) -> Distribution:
        """
        Build the named distribution.

        Raises:
            ValueError: If the name is unknown or the parameters do not fit
                the factory's signature.
        """
        if name not in self._factories:
            raise ValueError(
                f"Sampler {name} not registered. Available: {self.names}"
            )
        try:
            return self._factories[name](**params)
        except TypeError as e:
            raise ValueError(
                f"Invalid parameters {sorted(params)} for {name}: {e}"
            ) from e


registry = SamplerRegistry()


def _check_scale(name: str, value: float) -> None:
    if not value > 0:
        raise ValueError(f"{name} must be positive, got {value}")


@registry.register("constant")
def constant(*, value: float) -> Distribution:
    """Point mass, e.g. unit discriminations or a fixed step."""
    return PointMass(value=value)


@registry.register("normal")
def normal(*, mean: float = 0.0, std: float = 1.0) -> ScipyDistribution:
    _check_scale("std", std)
    return ScipyDistribution(stats.norm(loc=mean, scale=std))


@registry.register("bimodal")
def bimodal(
    *,
    mean1: float,
    std1: float,
    mean2: float,
    std2: float,
    weight1: float,
) -> Distribution:
    """Two-component normal mixture; the second weight is 1 - weight1."""
    _check_scale("std1", std1)
    _check_scale("std2", std2)
    return MixtureDistribution(
        components=[
            ScipyDistribution(stats.norm(loc=mean1, scale=std1)),
            ScipyDistribution(stats.norm(loc=mean2, scale=std2)),
        ],
        weights=[weight1, 1.0 - weight1],
    )


@registry.register("uniform")
def uniform(*, low: float = -1.0, high: float = 1.0) -> ScipyDistribution:
    if not high > low:
        raise ValueError(f"high must exceed low, got [{low}, {high}]")
    return ScipyDistribution(stats.uniform(loc=low, scale=high - low))


@registry.register("truncated_normal")
def truncated_normal(
    *,
    mean: float = 0.0,
    std: float = 1.0,
    lower: float | None = None,
    upper: float | None = None,
) -> ScipyDistribution:
    """
    Normal(mean, std) restricted to [lower, upper].

    A positive lower bound gives strictly positive discriminations.
    None leaves that side unbounded.
    """
    _check_scale("std", std)
    if lower is not None and upper is not None and not upper > lower:
        raise ValueError(f"upper must exceed lower, got [{lower}, {upper}]")
    # scipy.stats.truncnorm takes the bounds in standard units
    a = (lower - mean) / std if lower is not None else -np.inf
    b = (upper - mean) / std if upper is not None else np.inf
    return ScipyDistribution(stats.truncnorm(a, b, loc=mean, scale=std))


@registry.register("student_t")
def student_t(
    *, df: float, loc: float = 0.0, scale: float = 1.0
) -> ScipyDistribution:
    """Heavy-tailed alternative to the normal ability distribution."""
    _check_scale("df", df)
    _check_scale("scale", scale)
    return ScipyDistribution(stats.t(df=df, loc=loc, scale=scale))


@registry.register("log_normal")
def log_normal(*, mean: float, std: float) -> ScipyDistribution:
    """
    Log-normal with the given mean and std on the natural scale.

    The underlying normal has variance s² = log(1 + std²/mean²) and mean
    log(mean) - s²/2.
    """
    _check_scale("mean", mean)
    _check_scale("std", std)
    s = np.sqrt(np.log(1 + std**2 / mean**2))
    mu = np.log(mean) - s**2 / 2
    return ScipyDistribution(stats.lognorm(s=s, scale=np.exp(mu)))


def draw_sample(
    n: int,
    distribution_name: str = "normal",
    distribution_params: dict[str, float | None] | None = None,
    rng: Generator | None = None,
) -> NDArray[np.float64]:
    """
    Draw n values from a registered distribution.

    Args:
        n: Number of values.
        distribution_name: Registered name.
        distribution_params: Keyword parameters of the distribution.
        rng: Random number generator. A fresh unseeded one if None.

    Returns:
        Array of shape (n,).
    """
    distribution = registry.get_sampler(
        distribution_name, distribution_params or {}
    )
    return distribution.sample(n, get_rng(rng))
