"""
Ordinary least squares: the line (one predictor) or plane/hyperplane
(several predictors) minimizing the sum of squared vertical residuals.

fit_simple_ols is the closed-form slope/intercept used to introduce the idea.
OLSRegressor solves the general problem with numpy.linalg.lstsq (SVD), which
stays stable when predictors are nearly collinear, and plugs into sklearn
pipelines and cross-validation.
"""

from __future__ import annotations

from typing import Any

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator, RegressorMixin

from dsci_ml.core.exceptions import DataShapeError, ModelNotFittedError
from dsci_ml.core.validation import feature_names, validate_x, validate_xy
from dsci_ml.dsci_logging import get_logger

logger = get_logger(__name__)

# Above this the design matrix is treated as ill-conditioned (multicollinearity)
CONDITION_NUMBER_WARN = 1e6


def fit_simple_ols(x: Any, y: Any) -> tuple[float, float]:
    """
    Closed-form simple linear regression.

    slope = sum((x - x̄)(y - ȳ)) / sum((x - x̄)^2), intercept = ȳ - slope * x̄.
    Returns (slope, intercept). Raises DataShapeError when x has no spread.
    """
    X, y_arr = validate_xy(np.ravel(x), y, min_samples=2, y_numeric=True)
    x_arr = X[:, 0]
    if np.ptp(x_arr) == 0.0:
        raise DataShapeError("x has zero variance; slope is undefined")
    x_centered = x_arr - x_arr.mean()
    sxx = float(np.dot(x_centered, x_centered))
    slope = float(np.dot(x_centered, y_arr - y_arr.mean()) / sxx)
    intercept = float(y_arr.mean() - slope * x_arr.mean())
    return slope, intercept


def condition_number(X: Any) -> float:
    """Ratio of largest to smallest singular value of X (inf when rank deficient)."""
    X_arr = np.asarray(X, dtype=np.float64)
    if X_arr.ndim == 1:
        X_arr = X_arr.reshape(-1, 1)
    singular = np.linalg.svd(X_arr, compute_uv=False)
    if singular.size == 0 or singular[-1] == 0.0:
        return float("inf")
    return float(singular[0] / singular[-1])


class OLSRegressor(RegressorMixin, BaseEstimator):
    """
    Linear regression fitted by least squares.

    Attributes after fit: coef_ (one slope per predictor), intercept_,
    n_features_in_, feature_names_in_ (DataFrame input only), rank_ and
    singular_ of the design matrix.
    """

    def __init__(self, fit_intercept: bool = True):
        self.fit_intercept = fit_intercept

    def fit(self, X: Any, y: Any) -> "OLSRegressor":
        X_arr, y_arr = validate_xy(X, y, min_samples=2, y_numeric=True)
        n_samples, n_features = X_arr.shape
        if self.fit_intercept:
            design = np.column_stack([np.ones(n_samples), X_arr])
        else:
            design = X_arr

        beta, _residuals, rank, singular = np.linalg.lstsq(design, y_arr, rcond=None)

        if self.fit_intercept:
            self.intercept_ = float(beta[0])
            self.coef_ = np.asarray(beta[1:], dtype=np.float64)
        else:
            self.intercept_ = 0.0
            self.coef_ = np.asarray(beta, dtype=np.float64)
        self.n_features_in_ = n_features
        names = feature_names(X)
        if names is not None:
            self.feature_names_in_ = names
        self.rank_ = int(rank)
        self.singular_ = singular

        if rank < design.shape[1]:
            logger.warning(
                "ols_rank_deficient",
                rank=int(rank),
                columns=int(design.shape[1]),
                message="predictors are linearly dependent; coefficients are not unique",
            )
        elif singular.size and singular[-1] > 0 and singular[0] / singular[-1] > CONDITION_NUMBER_WARN:
            logger.warning("ols_ill_conditioned", condition_number=float(singular[0] / singular[-1]))
        logger.debug(
            "ols_fitted",
            n_samples=n_samples,
            n_features=n_features,
            intercept=self.intercept_,
            coef=self.coef_.tolist(),
        )
        return self

    def _check_fitted(self) -> None:
        if not hasattr(self, "coef_"):
            raise ModelNotFittedError(type(self).__name__)

    def predict(self, X: Any) -> np.ndarray:
        self._check_fitted()
        X_arr = validate_x(X, self.n_features_in_)
        return self.intercept_ + X_arr @ self.coef_

    def _term_names(self) -> list[str]:
        names = getattr(self, "feature_names_in_", None)
        if names is not None:
            return [str(n) for n in names]
        if self.n_features_in_ == 1:
            return ["x"]
        return [f"x{i + 1}" for i in range(self.n_features_in_)]

    def coef_table(self) -> pd.DataFrame:
        """Estimates as a table: intercept first, then one row per predictor."""
        self._check_fitted()
        terms = self._term_names()
        estimates = list(self.coef_)
        if self.fit_intercept:
            terms = ["intercept"] + terms
            estimates = [self.intercept_] + estimates
        return pd.DataFrame({"term": terms, "estimate": np.asarray(estimates, dtype=np.float64)})

    def equation(self, target: str = "y", precision: int = 4) -> str:
        """e.g. 'y = 2.0000 + 3.0000*x'."""
        self._check_fitted()
        parts: list[str] = []
        if self.fit_intercept:
            parts.append(f"{self.intercept_:.{precision}f}")
        for name, coef in zip(self._term_names(), self.coef_):
            if parts:
                sign = "-" if coef < 0 else "+"
                parts.append(f"{sign} {abs(coef):.{precision}f}*{name}")
            else:
                parts.append(f"{coef:.{precision}f}*{name}")
        return f"{target} = " + " ".join(parts)
