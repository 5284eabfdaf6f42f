"""
End-to-end chapter workflows: split, tune, fit, evaluate.
"""

from dsci_ml.workflows.classification import ClassificationResult, run_knn_classification
from dsci_ml.workflows.regression import (
    RegressionResult,
    compare_regressions,
    run_knn_regression,
    run_linear_regression,
)

__all__ = [
    "ClassificationResult",
    "RegressionResult",
    "compare_regressions",
    "run_knn_classification",
    "run_knn_regression",
    "run_linear_regression",
]
