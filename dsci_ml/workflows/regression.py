"""
Regression workflows: OLS linear regression and k-NN regression.

Both split the data the same way (same seed, no stratification), so their
test RMSPE values are directly comparable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Sequence

import pandas as pd

from dsci_ml.data import split_xy, train_test_split_df
from dsci_ml.dsci_logging import get_logger
from dsci_ml.evaluation import r_squared, rmse, rmspe
from dsci_ml.model_selection import best_k, tune_k
from dsci_ml.neighbors import KNNRegressor
from dsci_ml.preprocessing import make_pipeline
from dsci_ml.regression import OLSRegressor

logger = get_logger(__name__)


@dataclass
class RegressionResult:
    model: Any
    rmse: float
    rmspe: float
    r_squared: float
    predictors: list[str]
    train_size: int
    test_size: int
    coefficients: pd.DataFrame | None = None
    best_k: int | None = None
    tuning: pd.DataFrame | None = None


def _split(
    df: pd.DataFrame,
    target: str,
    predictors: Sequence[str] | None,
    train_size: float | None,
    random_state: int | None,
):
    split_xy(df, target, predictors)
    train_df, test_df = train_test_split_df(
        df, target, train_size, stratify=False, random_state=random_state
    )
    X_train, y_train = split_xy(train_df, target, predictors)
    X_test, y_test = split_xy(test_df, target, predictors)
    return X_train, y_train, X_test, y_test


def run_linear_regression(
    df: pd.DataFrame,
    target: str,
    predictors: Sequence[str] | None = None,
    *,
    train_size: float | None = None,
    random_state: int | None = None,
) -> RegressionResult:
    """Fit OLS on the training split; report training RMSE and test RMSPE."""
    X_train, y_train, X_test, y_test = _split(df, target, predictors, train_size, random_state)

    model = OLSRegressor().fit(X_train, y_train)
    train_rmse = rmse(y_train, model.predict(X_train))
    test_pred = model.predict(X_test)
    test_rmspe = rmspe(y_test, test_pred)
    test_r2 = r_squared(y_test, test_pred)

    logger.info(
        "linear_regression_evaluated",
        target=target,
        equation=model.equation(target=target),
        rmse=train_rmse,
        rmspe=test_rmspe,
    )
    return RegressionResult(
        model=model,
        rmse=train_rmse,
        rmspe=test_rmspe,
        r_squared=test_r2,
        predictors=list(X_train.columns),
        train_size=len(y_train),
        test_size=len(y_test),
        coefficients=model.coef_table(),
    )


def run_knn_regression(
    df: pd.DataFrame,
    target: str,
    predictors: Sequence[str] | None = None,
    k_values: Iterable[int] | None = None,
    *,
    folds: int | None = None,
    train_size: float | None = None,
    random_state: int | None = None,
    scale: bool = True,
    metric: str = "euclidean",
) -> RegressionResult:
    """Tune k by cross-validated RMSPE, refit on the training split, report test RMSPE."""
    X_train, y_train, X_test, y_test = _split(df, target, predictors, train_size, random_state)

    tuning = tune_k(
        X_train,
        y_train,
        k_values,
        task="regression",
        folds=folds,
        scale=scale,
        metric=metric,
        random_state=random_state,
    )
    k = best_k(tuning)

    model = make_pipeline(KNNRegressor(n_neighbors=k, metric=metric), scale=scale)
    model.fit(X_train, y_train)
    train_rmse = rmse(y_train, model.predict(X_train))
    test_pred = model.predict(X_test)
    test_rmspe = rmspe(y_test, test_pred)

    logger.info(
        "knn_regression_evaluated",
        target=target,
        best_k=k,
        rmse=train_rmse,
        rmspe=test_rmspe,
    )
    return RegressionResult(
        model=model,
        rmse=train_rmse,
        rmspe=test_rmspe,
        r_squared=r_squared(y_test, test_pred),
        predictors=list(X_train.columns),
        train_size=len(y_train),
        test_size=len(y_test),
        best_k=k,
        tuning=tuning,
    )


def compare_regressions(
    df: pd.DataFrame,
    target: str,
    predictors: Sequence[str] | None = None,
    k_values: Iterable[int] | None = None,
    *,
    folds: int | None = None,
    train_size: float | None = None,
    random_state: int | None = None,
) -> pd.DataFrame:
    """Test RMSPE of OLS and tuned k-NN regression on the same split."""
    linear = run_linear_regression(
        df, target, predictors, train_size=train_size, random_state=random_state
    )
    knn = run_knn_regression(
        df,
        target,
        predictors,
        k_values,
        folds=folds,
        train_size=train_size,
        random_state=random_state,
    )
    return pd.DataFrame(
        {
            "model": ["linear regression", f"k-nn regression (k={knn.best_k})"],
            "rmspe": [linear.rmspe, knn.rmspe],
        }
    )
