"""
Standardization (centre to mean 0, scale to standard deviation 1).

k-NN distances are dominated by whichever predictor has the largest units,
so predictors are standardized before fitting. The scaler lives inside a
Pipeline so cross-validation fits it on each training fold only.
"""

from __future__ import annotations

from typing import Any, Sequence

import pandas as pd
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler

from dsci_ml.core.exceptions import DatasetError


def make_pipeline(estimator: Any, scale: bool = True) -> Pipeline:
    """Return Pipeline([("scaler", StandardScaler()), ("model", estimator)]); no scaler when scale=False."""
    steps: list[tuple[str, Any]] = []
    if scale:
        steps.append(("scaler", StandardScaler()))
    steps.append(("model", estimator))
    return Pipeline(steps)


def standardize(df: pd.DataFrame, columns: Sequence[str] | None = None) -> pd.DataFrame:
    """
    Return a copy of df with the given numeric columns standardized.

    Defaults to every numeric column. Meant for exploration and plots; models
    should use make_pipeline so the scaler sees training data only.
    """
    if columns is None:
        columns = list(df.select_dtypes(include="number").columns)
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise DatasetError(f"columns not in dataset: {missing}")
    out = df.copy()
    if not columns:
        return out
    out[list(columns)] = StandardScaler().fit_transform(out[list(columns)].astype(float))
    return out
