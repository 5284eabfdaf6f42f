"""
Input validation shared by the estimators and metrics.

Wraps sklearn's check_array / check_X_y so that malformed input surfaces as
DataShapeError rather than a bare ValueError.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from sklearn.utils.validation import check_array, check_X_y

from dsci_ml.core.exceptions import DataShapeError


def feature_names(X: Any) -> np.ndarray | None:
    """Return column names when X is a DataFrame, else None."""
    columns = getattr(X, "columns", None)
    if columns is None:
        return None
    return np.asarray([str(c) for c in columns], dtype=object)


def _as_2d(X: Any) -> Any:
    """A 1D X (list, array, Series) is one predictor column; DataFrames pass through."""
    if hasattr(X, "columns"):
        return X
    X = np.asarray(X)
    if X.ndim == 1:
        X = X.reshape(-1, 1)
    return X


def validate_xy(
    X: Any,
    y: Any,
    *,
    min_samples: int = 1,
    y_numeric: bool = False,
) -> tuple[np.ndarray, np.ndarray]:
    """Return (X, y) as a 2D float array and a 1D array with matching rows."""
    try:
        return check_X_y(
            _as_2d(X),
            y,
            dtype=np.float64,
            ensure_min_samples=min_samples,
            y_numeric=y_numeric,
        )
    except ValueError as e:
        raise DataShapeError(str(e)) from e


def validate_x(X: Any, n_features: int) -> np.ndarray:
    """Return X as a 2D float array with exactly n_features columns."""
    try:
        X_arr = check_array(_as_2d(X), dtype=np.float64)
    except ValueError as e:
        raise DataShapeError(str(e)) from e
    if X_arr.shape[1] != n_features:
        raise DataShapeError(
            f"X has {X_arr.shape[1]} features, but the model was fitted with {n_features}"
        )
    return X_arr


def validate_targets(y_true: Any, y_pred: Any) -> tuple[np.ndarray, np.ndarray]:
    """Return two equal-length, non-empty 1D arrays."""
    t = np.asarray(y_true).ravel()
    p = np.asarray(y_pred).ravel()
    if t.size == 0:
        raise DataShapeError("y_true is empty")
    if t.shape[0] != p.shape[0]:
        raise DataShapeError(
            f"y_true and y_pred have different lengths: {t.shape[0]} != {p.shape[0]}"
        )
    return t, p
