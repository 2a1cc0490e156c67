import numpy as np
import pandas as pd
import pytest

from ratingscale.core.data import load_responses_csv, save_responses_csv
from ratingscale.core.data_models import ResponseData


class TestLoadResponses:
    def test_labels_in_order_of_appearance(self, tmp_path) -> None:
        path = tmp_path / "responses.csv"
        pd.DataFrame(
            {
                "person": ["bob", "bob", "ann", "ann"],
                "item": ["q2", "q1", "q1", "q2"],
                "response": [1, 0, 2, 2],
            }
        ).to_csv(path, index=False)

        persons, items, data = load_responses_csv(path)

        assert persons == ["bob", "ann"]
        assert items == ["q2", "q1"]
        np.testing.assert_array_equal(data.persons, [0, 0, 1, 1])
        np.testing.assert_array_equal(data.items, [0, 1, 1, 0])
        assert data.n_categories == 3

    def test_covariates_define_person_order(self, tmp_path) -> None:
        path = tmp_path / "responses.csv"
        cov_path = tmp_path / "covariates.csv"
        pd.DataFrame(
            {"person": ["b", "a"], "item": ["x", "x"], "response": [1, 0]}
        ).to_csv(path, index=False)
        pd.DataFrame(
            {"person": ["a", "b", "c"], "w1": [1.0, 1.0, 1.0], "w2": [0.1, 0.2, 0.3]}
        ).to_csv(cov_path, index=False)

        persons, _, data = load_responses_csv(path, cov_path, n_categories=4)

        assert persons == ["a", "b", "c"]
        np.testing.assert_array_equal(data.persons, [1, 0])
        assert data.n_persons == 3
        assert data.n_categories == 4
        np.testing.assert_allclose(data.design[:, 1], [0.1, 0.2, 0.3])

    def test_missing_column(self, tmp_path) -> None:
        path = tmp_path / "responses.csv"
        pd.DataFrame({"person": ["a"], "item": ["x"]}).to_csv(path, index=False)

        with pytest.raises(ValueError, match="response"):
            load_responses_csv(path)

    def test_person_without_covariates(self, tmp_path) -> None:
        path = tmp_path / "responses.csv"
        cov_path = tmp_path / "covariates.csv"
        pd.DataFrame(
            {"person": ["a", "z"], "item": ["x", "x"], "response": [1, 0]}
        ).to_csv(path, index=False)
        pd.DataFrame({"person": ["a"], "w1": [1.0]}).to_csv(cov_path, index=False)

        with pytest.raises(ValueError, match="without covariates"):
            load_responses_csv(path, cov_path)

    def test_duplicate_covariate_rows(self, tmp_path) -> None:
        path = tmp_path / "responses.csv"
        cov_path = tmp_path / "covariates.csv"
        pd.DataFrame(
            {"person": ["a"], "item": ["x"], "response": [1]}
        ).to_csv(path, index=False)
        pd.DataFrame({"person": ["a", "a"], "w1": [1.0, 1.0]}).to_csv(
            cov_path, index=False
        )

        with pytest.raises(ValueError, match="duplicated"):
            load_responses_csv(path, cov_path)


class TestSaveResponses:
    def test_round_trip(self, tmp_path) -> None:
        data = ResponseData(
            items=np.array([1, 0, 0, 1], dtype=np.int64),
            persons=np.array([0, 0, 1, 1], dtype=np.int64),
            responses=np.array([2, 0, 1, 3], dtype=np.int64),
            n_categories=4,
            covariates=np.array([[1.0, 0.5], [1.0, -0.5]]),
        )
        path = tmp_path / "responses.csv"
        cov_path = tmp_path / "covariates.csv"

        save_responses_csv(data, path, cov_path)
        persons, items, loaded = load_responses_csv(path, cov_path, n_categories=4)

        assert persons == ["p0", "p1"]
        assert items == ["i0", "i1"]
        np.testing.assert_array_equal(loaded.to_matrix(), data.to_matrix())
        np.testing.assert_allclose(loaded.design, data.design)

    def test_rows_sorted_by_person_then_item(self, tmp_path) -> None:
        data = ResponseData(
            items=np.array([1, 0, 1, 0], dtype=np.int64),
            persons=np.array([1, 1, 0, 0], dtype=np.int64),
            responses=np.array([0, 1, 1, 0], dtype=np.int64),
            n_categories=2,
        )
        path = tmp_path / "responses.csv"

        save_responses_csv(data, path, person_labels=["a", "b"], item_labels=["x", "y"])
        df = pd.read_csv(path)

        assert df["person"].tolist() == ["a", "a", "b", "b"]
        assert df["item"].tolist() == ["x", "y", "x", "y"]
