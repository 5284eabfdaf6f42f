"""
Tests for evaluation metrics.
"""

from __future__ import annotations

import math

import pytest

from dsci_ml.core.exceptions import DataShapeError
from dsci_ml.evaluation import (
    accuracy,
    confusion_table,
    precision,
    r_squared,
    recall,
    rmse,
    rmspe,
)


def test_accuracy():
    assert accuracy(["a", "b", "a"], ["a", "a", "a"]) == pytest.approx(2 / 3)


def test_precision_and_recall_for_positive_label():
    truth = ["malignant", "malignant", "benign", "benign", "malignant"]
    pred = ["malignant", "benign", "malignant", "benign", "malignant"]
    # 2 true positives, 1 false positive, 1 false negative
    assert precision(truth, pred, pos_label="malignant") == pytest.approx(2 / 3)
    assert recall(truth, pred, pos_label="malignant") == pytest.approx(2 / 3)
    assert recall(truth, pred, pos_label="benign") == pytest.approx(1 / 2)


def test_precision_when_nothing_predicted_positive():
    assert precision([1, 0, 1], [0, 0, 0], pos_label=1) == 0.0


def test_confusion_table_rows_are_truth():
    table = confusion_table(["a", "a", "b"], ["a", "b", "b"])
    assert table.index.name == "truth"
    assert table.columns.name == "prediction"
    assert table.loc["a", "a"] == 1
    assert table.loc["a", "b"] == 1
    assert table.loc["b", "b"] == 1
    assert table.loc["b", "a"] == 0
    assert int(table.to_numpy().sum()) == 3


def test_confusion_table_explicit_labels():
    table = confusion_table([1, 1], [1, 1], labels=[0, 1])
    assert list(table.index) == [0, 1]
    assert table.loc[0, 0] == 0


def test_rmse_and_rmspe_formula():
    truth = [1.0, 2.0, 3.0]
    pred = [1.0, 2.0, 5.0]
    expected = math.sqrt(4.0 / 3.0)
    assert rmse(truth, pred) == pytest.approx(expected)
    assert rmspe(truth, pred) == pytest.approx(expected)


def test_r_squared_perfect_fit():
    assert r_squared([1.0, 2.0, 3.0], [1.0, 2.0, 3.0]) == pytest.approx(1.0)


@pytest.mark.parametrize("metric", [accuracy, rmse, rmspe, r_squared])
def test_empty_input(metric):
    with pytest.raises(DataShapeError, match="empty"):
        metric([], [])


@pytest.mark.parametrize("metric", [accuracy, rmse, rmspe])
def test_mismatched_lengths(metric):
    with pytest.raises(DataShapeError, match="different lengths"):
        metric([1.0, 2.0], [1.0])


def test_rmspe_rejects_labels():
    with pytest.raises(DataShapeError, match="numeric"):
        rmspe(["a", "b"], ["a", "b"])
