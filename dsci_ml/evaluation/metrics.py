"""
Evaluation metrics.

Classification: accuracy, precision and recall for one positive label, and
a confusion table. Regression: RMSE on the data the model was fitted to and
RMSPE on held-out data (same formula, different data), plus R².
"""

from __future__ import annotations

from typing import Any, Sequence

import numpy as np
import pandas as pd
from sklearn import metrics as skm

from dsci_ml.core.exceptions import DataShapeError
from dsci_ml.core.validation import validate_targets


def accuracy(y_true: Any, y_pred: Any) -> float:
    """Fraction of correct predictions."""
    t, p = validate_targets(y_true, y_pred)
    return float(skm.accuracy_score(t, p))


def precision(y_true: Any, y_pred: Any, pos_label: Any) -> float:
    """Of the observations predicted pos_label, the fraction truly pos_label (0 when none predicted)."""
    t, p = validate_targets(y_true, y_pred)
    return float(skm.precision_score(t, p, pos_label=pos_label, average="binary", zero_division=0))


def recall(y_true: Any, y_pred: Any, pos_label: Any) -> float:
    """Of the observations truly pos_label, the fraction predicted pos_label."""
    t, p = validate_targets(y_true, y_pred)
    return float(skm.recall_score(t, p, pos_label=pos_label, average="binary", zero_division=0))


def confusion_table(
    y_true: Any,
    y_pred: Any,
    labels: Sequence[Any] | None = None,
) -> pd.DataFrame:
    """Confusion matrix as a DataFrame: rows = truth, columns = prediction."""
    t, p = validate_targets(y_true, y_pred)
    if labels is None:
        labels = list(np.unique(np.concatenate([t, p])))
    matrix = skm.confusion_matrix(t, p, labels=list(labels))
    index = pd.Index(list(labels), name="truth")
    columns = pd.Index(list(labels), name="prediction")
    return pd.DataFrame(matrix, index=index, columns=columns)


def _root_mean_squared(y_true: Any, y_pred: Any) -> float:
    t, p = validate_targets(y_true, y_pred)
    try:
        t = t.astype(np.float64)
        p = p.astype(np.float64)
    except (TypeError, ValueError) as e:
        raise DataShapeError(f"regression targets must be numeric: {e}") from e
    return float(np.sqrt(skm.mean_squared_error(t, p)))


def rmse(y_true: Any, y_pred: Any) -> float:
    """Root mean squared error on the training data."""
    return _root_mean_squared(y_true, y_pred)


def rmspe(y_true: Any, y_pred: Any) -> float:
    """Root mean squared prediction error on held-out data."""
    return _root_mean_squared(y_true, y_pred)


def r_squared(y_true: Any, y_pred: Any) -> float:
    """Coefficient of determination."""
    t, p = validate_targets(y_true, y_pred)
    return float(skm.r2_score(t.astype(np.float64), p.astype(np.float64)))
