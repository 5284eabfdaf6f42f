"""
k-NN classification workflow.

1. Stratified train/test split.
2. Tune k by cross-validated accuracy on the training set.
3. Refit the scaler + classifier with the best k on the whole training set.
4. Predict the test set; report accuracy, precision/recall (binary
   targets), and the confusion table.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Sequence

import pandas as pd
from sklearn.pipeline import Pipeline

from dsci_ml.data import split_xy, train_test_split_df
from dsci_ml.dsci_logging import get_logger
from dsci_ml.evaluation import accuracy, confusion_table, precision, recall
from dsci_ml.model_selection import best_k, tune_k
from dsci_ml.neighbors import KNNClassifier
from dsci_ml.preprocessing import make_pipeline

logger = get_logger(__name__)


@dataclass
class ClassificationResult:
    best_k: int
    tuning: pd.DataFrame
    test_accuracy: float
    precision: float | None
    recall: float | None
    positive_label: Any
    confusion: pd.DataFrame
    model: Pipeline
    predictors: list[str]
    train_size: int
    test_size: int


def run_knn_classification(
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
    positive_label: Any = None,
) -> ClassificationResult:
    """
    Run the classification chapter on df.

    positive_label selects the class precision/recall are reported for;
    by default the last class in sorted order. Precision/recall are None
    when the target has more than two classes.
    """
    split_xy(df, target, predictors)
    # integer-coded labels are classes here too
    train_df, test_df = train_test_split_df(
        df, target, train_size, stratify=True, random_state=random_state
    )
    X_train, y_train = split_xy(train_df, target, predictors)
    X_test, y_test = split_xy(test_df, target, predictors)

    tuning = tune_k(
        X_train,
        y_train,
        k_values,
        task="classification",
        folds=folds,
        scale=scale,
        metric=metric,
        random_state=random_state,
    )
    k = best_k(tuning)

    model = make_pipeline(KNNClassifier(n_neighbors=k, metric=metric), scale=scale)
    model.fit(X_train, y_train)
    y_pred = model.predict(X_test)

    classes = list(model.named_steps["model"].classes_)
    test_accuracy = accuracy(y_test, y_pred)
    prec: float | None = None
    rec: float | None = None
    if len(classes) == 2:
        if positive_label is None:
            positive_label = classes[-1]
        prec = precision(y_test, y_pred, pos_label=positive_label)
        rec = recall(y_test, y_pred, pos_label=positive_label)
    else:
        positive_label = None

    logger.info(
        "classification_evaluated",
        target=target,
        best_k=k,
        test_accuracy=test_accuracy,
        precision=prec,
        recall=rec,
        train_rows=len(train_df),
        test_rows=len(test_df),
    )
    return ClassificationResult(
        best_k=k,
        tuning=tuning,
        test_accuracy=test_accuracy,
        precision=prec,
        recall=rec,
        positive_label=positive_label,
        confusion=confusion_table(y_test, y_pred, labels=classes),
        model=model,
        predictors=list(X_train.columns),
        train_size=len(train_df),
        test_size=len(test_df),
    )
