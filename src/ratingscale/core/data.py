"""
CSV loading utilities for rating response data.
"""

from collections.abc import Sequence
from pathlib import Path

import numpy as np
import pandas as pd

from ratingscale.core.data_models import ResponseData

RESPONSE_COLUMNS = ("person", "item", "response")


def load_responses_csv(
    path: Path,
    covariates_path: Path | None = None,
    n_categories: int | None = None,
) -> tuple[list[str], list[str], ResponseData]:
    """Load long-format ratings (and optional person covariates).

    Expected response CSV columns:
        - person: person label
        - item: item label
        - response: observed category (0..m)

    The covariates CSV, if given, has a ``person`` column followed by the K
    covariate columns (the first conventionally all ones). Its row order
    defines the person indices; otherwise persons are indexed in order of
    first appearance in the response file. Items are always indexed in order
    of first appearance.

    Returns:
        Tuple of (person_labels, item_labels, ResponseData).

    Raises:
        ValueError: If CSV format is invalid or data is inconsistent.
    """
    df = pd.read_csv(path, dtype={"person": str, "item": str})

    for column in RESPONSE_COLUMNS:
        if column not in df.columns:
            raise ValueError(f"CSV must have '{column}' column")
    if df["response"].isna().any():
        raise ValueError("CSV 'response' column must not have missing values")

    item_codes, item_index = pd.factorize(df["item"], sort=False)
    item_labels: list[str] = [str(x) for x in item_index]

    covariates = None
    if covariates_path is not None:
        cov_df = pd.read_csv(covariates_path, dtype={"person": str})
        if "person" not in cov_df.columns:
            raise ValueError("Covariates CSV must have 'person' column")
        if cov_df["person"].duplicated().any():
            raise ValueError("Covariates CSV has duplicated persons")
        person_labels: list[str] = cov_df["person"].tolist()
        lookup = {label: idx for idx, label in enumerate(person_labels)}
        unknown = set(df["person"]) - set(lookup)
        if unknown:
            raise ValueError(
                f"Persons without covariates: {sorted(unknown)[:5]}"
            )
        person_codes = df["person"].map(lookup).to_numpy(dtype=np.int64)
        covariates = cov_df.drop(columns=["person"]).to_numpy(
            dtype=np.float64
        )
    else:
        codes, person_index = pd.factorize(df["person"], sort=False)
        person_codes = codes.astype(np.int64)
        person_labels = [str(x) for x in person_index]

    responses = df["response"].to_numpy(dtype=np.int64)
    if n_categories is None:
        n_categories = max(int(responses.max()) + 1, 2)

    data = ResponseData(
        items=item_codes.astype(np.int64),
        persons=person_codes,
        responses=responses,
        n_categories=n_categories,
        covariates=covariates,
    )
    return person_labels, item_labels, data


def save_responses_csv(
    data: ResponseData,
    path: Path,
    covariates_path: Path | None = None,
    person_labels: Sequence[str] | None = None,
    item_labels: Sequence[str] | None = None,
) -> None:
    """Write ratings (and optionally covariates) in the format read above.

    Rows are sorted by person, then item. Without labels, persons are
    written as ``p<index>`` and items as ``i<index>``.
    """
    if person_labels is None:
        person_labels = [f"p{j}" for j in range(data.n_persons)]
    if item_labels is None:
        item_labels = [f"i{i}" for i in range(data.n_items)]

    order = np.lexsort((data.items, data.persons))
    df = pd.DataFrame(
        {
            "person": [person_labels[j] for j in data.persons[order]],
            "item": [item_labels[i] for i in data.items[order]],
            "response": data.responses[order],
        }
    )
    df.to_csv(path, index=False)

    if covariates_path is not None:
        design = data.design
        cov_df = pd.DataFrame(
            design, columns=[f"w{k + 1}" for k in range(design.shape[1])]
        )
        cov_df.insert(0, "person", list(person_labels))
        cov_df.to_csv(covariates_path, index=False)
