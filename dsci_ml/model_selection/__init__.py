"""
Cross-validation, tuning of k, and forward predictor selection.
"""

from dsci_ml.model_selection.tuning import (
    DEFAULT_K_VALUES,
    best_k,
    cross_validate_model,
    forward_selection,
    tune_k,
)

__all__ = [
    "DEFAULT_K_VALUES",
    "best_k",
    "cross_validate_model",
    "forward_selection",
    "tune_k",
]
