"""
Predictor standardization for distance-based models.
"""

from dsci_ml.preprocessing.scaling import make_pipeline, standardize

__all__ = ["make_pipeline", "standardize"]
