"""
Brute-force k-nearest-neighbour classification and regression.
"""

from dsci_ml.neighbors.knn import (
    VALID_METRICS,
    KNNClassifier,
    KNNRegressor,
    pairwise_distances,
)

__all__ = ["VALID_METRICS", "KNNClassifier", "KNNRegressor", "pairwise_distances"]
