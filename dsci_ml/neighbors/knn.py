"""
k-nearest neighbours by brute force.

fit() only stores the neighbour table (training predictors and targets);
all work happens at predict time: compute the distance from each new
observation to every training observation, take the k closest, then vote
(classification) or average (regression).

Ordering rules, so results are reproducible:
- Neighbours at equal distance are ordered by training row (stable sort).
- A tied vote goes to the tied class owning the closest of the k neighbours.
"""

from __future__ import annotations

import numbers
from typing import Any

import numpy as np
from sklearn.base import BaseEstimator, ClassifierMixin, RegressorMixin

from dsci_ml.core.exceptions import DataShapeError, InvalidParameterError, ModelNotFittedError
from dsci_ml.core.validation import feature_names, validate_x, validate_xy
from dsci_ml.dsci_logging import get_logger

logger = get_logger(__name__)

VALID_METRICS = ("euclidean", "manhattan")


def pairwise_distances(A: Any, B: Any, metric: str = "euclidean") -> np.ndarray:
    """
    Distance from every row of A to every row of B; shape (len(A), len(B)).

    euclidean: sqrt(sum((a - b)^2)); manhattan: sum(|a - b|).
    """
    if metric not in VALID_METRICS:
        raise InvalidParameterError(f"metric must be one of {VALID_METRICS}, got {metric!r}")
    A_arr = np.atleast_2d(np.asarray(A, dtype=np.float64))
    B_arr = np.atleast_2d(np.asarray(B, dtype=np.float64))
    if A_arr.shape[1] != B_arr.shape[1]:
        raise DataShapeError(
            f"A and B must have the same number of columns: {A_arr.shape[1]} != {B_arr.shape[1]}"
        )
    diff = A_arr[:, np.newaxis, :] - B_arr[np.newaxis, :, :]
    if metric == "manhattan":
        return np.abs(diff).sum(axis=2)
    return np.sqrt((diff ** 2).sum(axis=2))


class _KNNBase(BaseEstimator):
    """Neighbour table and neighbour search shared by the classifier and regressor."""

    def __init__(self, n_neighbors: int = 5, metric: str = "euclidean"):
        self.n_neighbors = n_neighbors
        self.metric = metric

    def _check_params(self) -> None:
        k = self.n_neighbors
        if isinstance(k, bool) or not isinstance(k, numbers.Integral) or k < 1:
            raise InvalidParameterError(f"n_neighbors must be a positive integer, got {k!r}")
        if self.metric not in VALID_METRICS:
            raise InvalidParameterError(f"metric must be one of {VALID_METRICS}, got {self.metric!r}")

    def _store_table(self, X: Any, y: Any, *, y_numeric: bool) -> np.ndarray:
        self._check_params()
        X_arr, y_arr = validate_xy(X, y, y_numeric=y_numeric)
        n_samples = X_arr.shape[0]
        if self.n_neighbors > n_samples:
            raise InvalidParameterError(
                f"n_neighbors ({self.n_neighbors}) cannot exceed the number of training rows ({n_samples})"
            )
        self.X_train_ = X_arr
        self.n_features_in_ = X_arr.shape[1]
        names = feature_names(X)
        if names is not None:
            self.feature_names_in_ = names
        logger.debug(
            "knn_fitted",
            estimator=type(self).__name__,
            n_neighbors=int(self.n_neighbors),
            n_samples=n_samples,
            n_features=self.n_features_in_,
        )
        return y_arr

    def _check_fitted(self) -> None:
        if not hasattr(self, "X_train_"):
            raise ModelNotFittedError(type(self).__name__)

    def kneighbors(self, X: Any, n_neighbors: int | None = None) -> tuple[np.ndarray, np.ndarray]:
        """
        Return (distances, indices) of the k nearest training rows for each row of X,
        nearest first. Ties in distance keep training order.
        """
        self._check_fitted()
        k = self.n_neighbors if n_neighbors is None else n_neighbors
        if isinstance(k, bool) or not isinstance(k, numbers.Integral) or k < 1:
            raise InvalidParameterError(f"n_neighbors must be a positive integer, got {k!r}")
        if k > self.X_train_.shape[0]:
            raise InvalidParameterError(
                f"n_neighbors ({k}) cannot exceed the number of training rows ({self.X_train_.shape[0]})"
            )
        X_arr = validate_x(X, self.n_features_in_)
        dist = pairwise_distances(X_arr, self.X_train_, metric=self.metric)
        order = np.argsort(dist, axis=1, kind="stable")[:, :k]
        return np.take_along_axis(dist, order, axis=1), order


class KNNClassifier(ClassifierMixin, _KNNBase):
    """
    Majority vote among the k nearest training observations.

    Attributes after fit: classes_ (sorted unique labels), X_train_,
    y_train_ (labels), n_features_in_.
    """

    def fit(self, X: Any, y: Any) -> "KNNClassifier":
        y_arr = self._store_table(X, y, y_numeric=False)
        self.classes_, self._y_codes = np.unique(y_arr, return_inverse=True)
        self.y_train_ = y_arr
        return self

    def _neighbor_votes(self, X: Any) -> tuple[np.ndarray, np.ndarray]:
        """Return (per-class vote counts, neighbour class codes ordered nearest first)."""
        _dist, idx = self.kneighbors(X)
        codes = self._y_codes[idx]
        n_classes = len(self.classes_)
        counts = np.zeros((codes.shape[0], n_classes), dtype=np.int64)
        for c in range(n_classes):
            counts[:, c] = (codes == c).sum(axis=1)
        return counts, codes

    def predict_proba(self, X: Any) -> np.ndarray:
        """Vote fraction per class, columns in classes_ order."""
        counts, _codes = self._neighbor_votes(X)
        return counts / float(self.n_neighbors)

    def predict(self, X: Any) -> np.ndarray:
        counts, codes = self._neighbor_votes(X)
        winners = np.argmax(counts, axis=1)
        top = counts.max(axis=1)
        tied_rows = np.flatnonzero((counts == top[:, np.newaxis]).sum(axis=1) > 1)
        for row in tied_rows:
            tied = counts[row] == top[row]
            # codes[row] is ordered nearest first
            for code in codes[row]:
                if tied[code]:
                    winners[row] = code
                    break
        if tied_rows.size:
            logger.debug("knn_vote_ties_broken", rows=int(tied_rows.size))
        return self.classes_[winners]


class KNNRegressor(RegressorMixin, _KNNBase):
    """
    Mean target of the k nearest training observations.

    Attributes after fit: X_train_, y_train_ (float targets), n_features_in_.
    """

    def fit(self, X: Any, y: Any) -> "KNNRegressor":
        y_arr = self._store_table(X, y, y_numeric=True)
        self.y_train_ = np.asarray(y_arr, dtype=np.float64)
        return self

    def predict(self, X: Any) -> np.ndarray:
        _dist, idx = self.kneighbors(X)
        return self.y_train_[idx].mean(axis=1)
