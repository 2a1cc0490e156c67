import logging

import numpy as np
import pandas as pd
import pytest

from ratingscale.core.utils import get_rng
from ratingscale.irt.parameters import RatingScaleParameters
from ratingscale.reporting.summary import (
    SUMMARY_COLUMNS,
    flag_unconverged,
    parameter_values,
    point_summary,
    recovery_table,
    summarize_draws,
)


@pytest.fixture
def draws() -> dict[str, np.ndarray]:
    rng = get_rng(42)
    return {
        "sigma": rng.normal(1.2, 0.05, size=(4, 500)),
        "beta": rng.normal([-0.5, 0.0, 0.5], 0.1, size=(4, 500, 3)),
    }


class TestSummarizeDraws:
    def test_one_row_per_element(self, draws: dict[str, np.ndarray]) -> None:
        summary = summarize_draws(draws)

        assert list(summary.columns) == SUMMARY_COLUMNS
        assert list(summary.index) == ["sigma", "beta[1]", "beta[2]", "beta[3]"]
        assert summary.index.name == "parameter"

    def test_moments_and_interval(self, draws: dict[str, np.ndarray]) -> None:
        summary = summarize_draws(draws, interval=0.9)

        assert summary.loc["sigma", "mean"] == pytest.approx(1.2, abs=0.01)
        assert summary.loc["beta[3]", "mean"] == pytest.approx(0.5, abs=0.02)
        assert summary.loc["beta[1]", "sd"] == pytest.approx(0.1, abs=0.01)
        pooled = draws["sigma"].ravel()
        assert summary.loc["sigma", "lower"] == pytest.approx(
            np.quantile(pooled, 0.05)
        )
        assert summary.loc["sigma", "upper"] == pytest.approx(
            np.quantile(pooled, 0.95)
        )

    def test_mixed_chains_have_rhat_near_one(
        self, draws: dict[str, np.ndarray]
    ) -> None:
        summary = summarize_draws(draws)

        assert np.all(summary["r_hat"] < 1.05)

    def test_stuck_chain_detected(self) -> None:
        rng = get_rng(0)
        chains = rng.normal(0.0, 1.0, size=(4, 200))
        chains[0] += 5.0

        summary = summarize_draws({"lambda": chains[:, :, np.newaxis]})

        assert summary.loc["lambda[1]", "r_hat"] > 1.1

    def test_too_few_draws_gives_nan_rhat(self) -> None:
        summary = summarize_draws({"sigma": np.ones((2, 3))})

        assert np.isnan(summary.loc["sigma", "r_hat"])

    def test_rejects_flat_draws(self) -> None:
        with pytest.raises(ValueError, match="chain, draw"):
            summarize_draws({"sigma": np.ones(10)})

    @pytest.mark.parametrize("interval", [0.0, 1.0, 1.5])
    def test_rejects_bad_interval(
        self, draws: dict[str, np.ndarray], interval: float
    ) -> None:
        with pytest.raises(ValueError, match="interval"):
            summarize_draws(draws, interval=interval)


class TestFlagUnconverged:
    def test_flags_high_and_missing_rhat(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        summary = pd.DataFrame(
            {"r_hat": [1.001, 1.2, np.nan]}, index=["a", "b", "c"]
        )

        with caplog.at_level(logging.WARNING, logger="ratingscale"):
            flagged = flag_unconverged(summary)

        assert list(flagged.index) == ["b", "c"]
        assert "2 of 3 parameters" in caplog.text

    def test_nothing_flagged(self) -> None:
        summary = pd.DataFrame({"r_hat": [1.0, 1.01]}, index=["a", "b"])

        assert flag_unconverged(summary).empty


class TestParameterValues:
    def test_rsm_names(self) -> None:
        params = RatingScaleParameters(
            difficulties=(-0.2, 0.2),
            steps=(-1.0, 1.0),
            regression=(0.1, 0.3),
            sigma=1.4,
        )

        values = parameter_values(params)

        assert values == {
            "beta[1]": -0.2,
            "beta[2]": 0.2,
            "kappa[1]": -1.0,
            "kappa[2]": 1.0,
            "lambda[1]": 0.1,
            "lambda[2]": 0.3,
            "sigma": 1.4,
        }

    def test_grsm_names(self) -> None:
        params = RatingScaleParameters(
            difficulties=(0.0,), steps=(0.0,), discriminations=(1.3,)
        )

        values = parameter_values(params)

        assert values["alpha[1]"] == 1.3
        assert "sigma" not in values


class TestRecoveryTable:
    def test_joins_truth_and_coverage(self) -> None:
        summary = pd.DataFrame(
            {
                "mean": [0.1, 1.1, 5.0],
                "lower": [-0.1, 0.9, 4.0],
                "upper": [0.3, 1.05, 6.0],
            },
            index=["beta[1]", "sigma", "extra"],
        )

        table = recovery_table(summary, {"beta[1]": 0.0, "sigma": 1.1, "missing": 2.0})

        assert list(table.index) == ["beta[1]", "sigma"]
        np.testing.assert_allclose(table["error"], [0.1, 0.0], atol=1e-12)
        assert table.loc["beta[1]", "covered"]
        assert not table.loc["sigma", "covered"]

    def test_point_summary_without_intervals(self) -> None:
        params = RatingScaleParameters(difficulties=(0.0,), steps=(0.0,))

        table = recovery_table(point_summary(params), {"sigma": 1.5})

        assert list(table.columns) == ["true", "mean", "error"]
        assert table.loc["sigma", "error"] == pytest.approx(-0.5)
