"""
Accuracy and error metrics for classifiers and regressors.
"""

from dsci_ml.evaluation.metrics import (
    accuracy,
    confusion_table,
    precision,
    r_squared,
    recall,
    rmse,
    rmspe,
)

__all__ = [
    "accuracy",
    "confusion_table",
    "precision",
    "r_squared",
    "recall",
    "rmse",
    "rmspe",
]
