"""
Cross-validation for choosing k (and predictors).

The training set is split into folds; each fold takes a turn as the
validation set while the model (scaler included) is fitted on the rest.
The mean validation score estimates out-of-sample performance and the
standard error (sd / sqrt(folds)) shows how much it moved between folds.

Classification is scored by accuracy (higher is better) with stratified
folds; regression by RMSPE (lower is better) with plain shuffled folds.
"""

from __future__ import annotations

import math
import numbers
from typing import Any, Iterable, Sequence

import numpy as np
import pandas as pd
from sklearn.model_selection import KFold, StratifiedKFold, cross_val_score

from dsci_ml.config import get_settings
from dsci_ml.core.exceptions import DsciError, InvalidParameterError
from dsci_ml.dsci_logging import get_logger
from dsci_ml.neighbors import KNNClassifier, KNNRegressor
from dsci_ml.preprocessing import make_pipeline

logger = get_logger(__name__)

TASK_CLASSIFICATION = "classification"
TASK_REGRESSION = "regression"
TASKS = (TASK_CLASSIFICATION, TASK_REGRESSION)

METRIC_ACCURACY = "accuracy"
METRIC_RMSPE = "rmspe"
SCORINGS = (METRIC_ACCURACY, METRIC_RMSPE)

DEFAULT_K_VALUES = tuple(range(1, 16))

TUNING_COLUMNS = ["n_neighbors", "mean", "std_err", "n_folds", "metric"]


def _check_task(task: str) -> None:
    if task not in TASKS:
        raise InvalidParameterError(f"task must be one of {TASKS}, got {task!r}")


def _check_k_values(k_values: list[Any]) -> None:
    if not k_values:
        raise InvalidParameterError("k_values is empty")
    bad = [k for k in k_values if isinstance(k, bool) or not isinstance(k, numbers.Integral) or k < 1]
    if bad:
        raise InvalidParameterError(f"every k must be a positive integer, got {bad}")


def _splitter(scoring: str, folds: int, random_state: int) -> KFold | StratifiedKFold:
    if scoring == METRIC_ACCURACY:
        return StratifiedKFold(n_splits=folds, shuffle=True, random_state=random_state)
    return KFold(n_splits=folds, shuffle=True, random_state=random_state)


def _resolve(folds: int | None, random_state: int | None) -> tuple[int, int]:
    settings = get_settings()
    folds = settings.cv_folds if folds is None else int(folds)
    random_state = settings.random_seed if random_state is None else int(random_state)
    if folds < 2:
        raise InvalidParameterError(f"folds must be at least 2, got {folds}")
    return folds, random_state


def cross_validate_model(
    estimator: Any,
    X: Any,
    y: Any,
    *,
    folds: int | None = None,
    scoring: str = METRIC_ACCURACY,
    random_state: int | None = None,
) -> dict[str, Any]:
    """
    Cross-validate one estimator (usually a Pipeline).

    scoring is "accuracy" (stratified folds) or "rmspe" (plain shuffled folds).
    Returns {"metric", "mean", "std_err", "scores", "n_folds"}; RMSPE scores
    are positive.
    """
    if scoring not in SCORINGS:
        raise InvalidParameterError(f"scoring must be one of {SCORINGS}, got {scoring!r}")
    folds, random_state = _resolve(folds, random_state)
    n_samples = len(y)
    if folds > n_samples:
        raise InvalidParameterError(f"folds ({folds}) cannot exceed the number of rows ({n_samples})")

    sklearn_scoring = "accuracy" if scoring == METRIC_ACCURACY else "neg_root_mean_squared_error"
    try:
        scores = cross_val_score(
            estimator,
            X,
            y,
            cv=_splitter(scoring, folds, random_state),
            scoring=sklearn_scoring,
            error_score="raise",
        )
    except DsciError:
        raise
    except ValueError as e:
        raise InvalidParameterError(f"cross-validation failed: {e}") from e

    if scoring == METRIC_RMSPE:
        scores = -scores
    std_err = float(np.std(scores, ddof=1) / math.sqrt(len(scores)))
    return {
        "metric": scoring,
        "mean": float(np.mean(scores)),
        "std_err": std_err,
        "scores": scores.tolist(),
        "n_folds": folds,
    }


def _smallest_training_fold(n_samples: int, folds: int) -> int:
    """Rows in the smallest training portion of a fold split (the largest validation fold is held out)."""
    return n_samples - math.ceil(n_samples / folds)


def tune_k(
    X: Any,
    y: Any,
    k_values: Iterable[int] | None = None,
    *,
    task: str = TASK_CLASSIFICATION,
    folds: int | None = None,
    scale: bool = True,
    metric: str = "euclidean",
    random_state: int | None = None,
) -> pd.DataFrame:
    """
    Cross-validate a k-NN model for each k and return one row per k:
    n_neighbors, mean, std_err, n_folds, metric.

    Every k sees the same folds. k values larger than the smallest training
    fold are skipped.
    """
    _check_task(task)
    folds, random_state = _resolve(folds, random_state)
    k_values = list(DEFAULT_K_VALUES if k_values is None else k_values)
    _check_k_values(k_values)
    max_k = _smallest_training_fold(len(y), folds)
    usable = sorted({int(k) for k in k_values if int(k) <= max_k})
    skipped = sorted({int(k) for k in k_values if int(k) > max_k})
    if skipped:
        logger.warning("tuning_k_skipped", skipped=skipped, max_k=max_k, folds=folds)
    if not usable:
        raise InvalidParameterError(
            f"no usable k: every k exceeds the {max_k} rows available in a training fold"
        )

    if task == TASK_CLASSIFICATION:
        model_class, scoring = KNNClassifier, METRIC_ACCURACY
    else:
        model_class, scoring = KNNRegressor, METRIC_RMSPE
    rows: list[dict[str, Any]] = []
    for k in usable:
        pipeline = make_pipeline(model_class(n_neighbors=k, metric=metric), scale=scale)
        result = cross_validate_model(pipeline, X, y, folds=folds, scoring=scoring, random_state=random_state)
        rows.append(
            {
                "n_neighbors": k,
                "mean": result["mean"],
                "std_err": result["std_err"],
                "n_folds": result["n_folds"],
                "metric": result["metric"],
            }
        )
        logger.debug("tuning_k_scored", n_neighbors=k, metric=result["metric"], mean=result["mean"])

    results = pd.DataFrame(rows, columns=TUNING_COLUMNS)
    logger.info("tuning_k_done", task=task, k_count=len(results), folds=folds)
    return results


def best_k(results: pd.DataFrame) -> int:
    """
    k with the best mean score: highest accuracy or lowest RMSPE.
    Ties go to the smallest k.
    """
    if results.empty:
        raise InvalidParameterError("tuning results are empty")
    metric = str(results["metric"].iloc[0])
    ascending_mean = metric == METRIC_RMSPE
    ordered = results.sort_values(
        ["mean", "n_neighbors"],
        ascending=[ascending_mean, True],
        kind="mergesort",
    )
    return int(ordered["n_neighbors"].iloc[0])


def _model_string(target: str, predictors: Sequence[str]) -> str:
    return f"{target} ~ " + " + ".join(predictors)


def forward_selection(
    X: pd.DataFrame,
    y: Any,
    k_values: Iterable[int] | None = None,
    *,
    max_predictors: int | None = None,
    folds: int | None = None,
    scale: bool = True,
    metric: str = "euclidean",
    random_state: int | None = None,
) -> pd.DataFrame:
    """
    Greedy forward selection of predictors for k-NN classification.

    Start with no predictors; at each step try adding each remaining
    predictor, tune k by cross-validation, and keep the predictor giving the
    best accuracy. Returns one row per model size: size, predictors,
    model_string, accuracy. Ties between candidates go to the earlier column.
    """
    if not hasattr(X, "columns"):
        raise InvalidParameterError("forward_selection needs a DataFrame of named predictors")
    k_values = list(DEFAULT_K_VALUES if k_values is None else k_values)
    remaining = list(X.columns)
    limit = len(remaining) if max_predictors is None else min(int(max_predictors), len(remaining))
    target = str(getattr(y, "name", None) or "y")

    selected: list[str] = []
    rows: list[dict[str, Any]] = []
    for size in range(1, limit + 1):
        best_candidate: str | None = None
        best_accuracy = -np.inf
        for candidate in remaining:
            tuning = tune_k(
                X[selected + [candidate]],
                y,
                k_values,
                task=TASK_CLASSIFICATION,
                folds=folds,
                scale=scale,
                metric=metric,
                random_state=random_state,
            )
            accuracy = float(tuning["mean"].max())
            if accuracy > best_accuracy:
                best_accuracy = accuracy
                best_candidate = candidate
        selected.append(best_candidate)
        remaining.remove(best_candidate)
        rows.append(
            {
                "size": size,
                "predictors": list(selected),
                "model_string": _model_string(target, selected),
                "accuracy": best_accuracy,
            }
        )
        logger.info("forward_selection_step", size=size, added=best_candidate, accuracy=best_accuracy)

    return pd.DataFrame(rows, columns=["size", "predictors", "model_string", "accuracy"])
