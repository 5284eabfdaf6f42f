"""
Tests for OLS: closed-form simple fit, least-squares estimator, diagnostics.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest
from sklearn.base import clone
from sklearn.exceptions import NotFittedError
from structlog.testing import capture_logs

from dsci_ml.core.exceptions import DataShapeError, ModelNotFittedError
from dsci_ml.regression import OLSRegressor, condition_number, fit_simple_ols


def test_fit_simple_ols_recovers_exact_line(exact_line):
    x, y = exact_line
    slope, intercept = fit_simple_ols(x, y)
    assert slope == pytest.approx(3.0)
    assert intercept == pytest.approx(2.0)


def test_fit_simple_ols_matches_polyfit():
    rng = np.random.default_rng(3)
    x = rng.uniform(0, 20, 50)
    y = 4.0 - 0.7 * x + rng.normal(0, 2.0, 50)
    slope, intercept = fit_simple_ols(x, y)
    expected_slope, expected_intercept = np.polyfit(x, y, 1)
    assert slope == pytest.approx(expected_slope)
    assert intercept == pytest.approx(expected_intercept)


def test_fit_simple_ols_zero_variance():
    with pytest.raises(DataShapeError, match="zero variance"):
        fit_simple_ols([2.0, 2.0, 2.0], [1.0, 2.0, 3.0])


@pytest.mark.parametrize("value", [0.1, 1e-3, 123.456])
def test_fit_simple_ols_constant_inexact_float(value):
    # the mean of repeated 0.1 is not exactly 0.1
    with pytest.raises(DataShapeError, match="zero variance"):
        fit_simple_ols([value] * 3, [1.0, 2.0, 3.0])


def test_estimator_matches_closed_form(exact_line):
    x, y = exact_line
    rng = np.random.default_rng(1)
    y_noisy = y + rng.normal(0, 1.0, y.shape[0])
    model = OLSRegressor().fit(x.reshape(-1, 1), y_noisy)
    slope, intercept = fit_simple_ols(x, y_noisy)
    assert model.coef_[0] == pytest.approx(slope)
    assert model.intercept_ == pytest.approx(intercept)


def test_estimator_matches_normal_equation(linear_df):
    X = linear_df[["x1", "x2"]].to_numpy()
    y = linear_df["y"].to_numpy()
    design = np.column_stack([np.ones(len(X)), X])
    beta = np.linalg.solve(design.T @ design, design.T @ y)

    model = OLSRegressor().fit(X, y)
    assert model.intercept_ == pytest.approx(beta[0])
    np.testing.assert_allclose(model.coef_, beta[1:], rtol=1e-9)
    np.testing.assert_allclose(model.predict(X), design @ beta, rtol=1e-9)


def test_plane_recovers_true_coefficients(linear_df):
    model = OLSRegressor().fit(linear_df[["x1", "x2"]], linear_df["y"])
    assert model.intercept_ == pytest.approx(1.5, abs=0.05)
    assert model.coef_[0] == pytest.approx(2.0, abs=0.01)
    assert model.coef_[1] == pytest.approx(-0.5, abs=0.01)
    assert model.score(linear_df[["x1", "x2"]], linear_df["y"]) > 0.99


def test_no_intercept():
    X = np.array([[1.0], [2.0], [3.0]])
    model = OLSRegressor(fit_intercept=False).fit(X, [2.0, 4.0, 6.0])
    assert model.intercept_ == 0.0
    assert model.coef_[0] == pytest.approx(2.0)
    assert list(model.coef_table()["term"]) == ["x"]


def test_coef_table_uses_column_names(linear_df):
    model = OLSRegressor().fit(linear_df[["x1", "x2"]], linear_df["y"])
    table = model.coef_table()
    assert list(table.columns) == ["term", "estimate"]
    assert list(table["term"]) == ["intercept", "x1", "x2"]
    assert table["estimate"].iloc[0] == pytest.approx(model.intercept_)


def test_coef_table_default_names():
    X = np.array([[0.0, 1.0], [1.0, 0.0], [2.0, 2.0], [3.0, 1.0]])
    model = OLSRegressor().fit(X, [1.0, 2.0, 4.0, 4.5])
    assert list(model.coef_table()["term"]) == ["intercept", "x1", "x2"]


def test_equation_string():
    model = OLSRegressor().fit([[0.0], [1.0], [2.0]], [2.0, 5.0, 8.0])
    assert model.equation() == "y = 2.0000 + 3.0000*x"
    falling = OLSRegressor().fit(pd.DataFrame({"sqft": [0.0, 1.0, 2.0]}), [1.0, -1.0, -3.0])
    assert falling.equation(target="price", precision=1) == "price = 1.0 - 2.0*sqft"


def test_mismatched_rows():
    with pytest.raises(DataShapeError):
        OLSRegressor().fit([[1.0], [2.0], [3.0]], [1.0, 2.0])


def test_too_few_rows():
    with pytest.raises(DataShapeError):
        OLSRegressor().fit([[1.0]], [1.0])


def test_non_finite_values():
    with pytest.raises(DataShapeError):
        OLSRegressor().fit([[1.0], [np.nan], [3.0]], [1.0, 2.0, 3.0])


def test_predict_before_fit():
    with pytest.raises(ModelNotFittedError):
        OLSRegressor().predict([[1.0]])
    # also catchable the scikit-learn way
    with pytest.raises(NotFittedError):
        OLSRegressor().coef_table()


def test_predict_wrong_number_of_predictors(linear_df):
    model = OLSRegressor().fit(linear_df[["x1", "x2"]], linear_df["y"])
    with pytest.raises(DataShapeError, match="features"):
        model.predict([[1.0, 2.0, 3.0]])


def test_collinear_predictors_still_predict():
    x1 = np.arange(1.0, 8.0)
    X = np.column_stack([x1, 2.0 * x1])
    y = 1.0 + x1
    assert condition_number(X) > 1e6
    model = OLSRegressor().fit(X, y)
    assert model.rank_ < 3
    np.testing.assert_allclose(model.predict(X), y, atol=1e-8)


def test_condition_number_identity():
    assert condition_number(np.eye(3)) == pytest.approx(1.0)


def test_clone_keeps_params():
    cloned = clone(OLSRegressor(fit_intercept=False))
    assert cloned.get_params() == {"fit_intercept": False}
    assert not hasattr(cloned, "coef_")


def _warnings(logs):
    return [e["event"] for e in logs if e["log_level"] == "warning"]


def test_rank_deficient_fit_logs_warning():
    x1 = np.arange(1.0, 8.0)
    with capture_logs() as logs:
        OLSRegressor().fit(np.column_stack([x1, 2.0 * x1]), 1.0 + x1)
    assert _warnings(logs) == ["ols_rank_deficient"]
    assert [e for e in logs if e["event"] == "ols_rank_deficient"][0]["rank"] == 2


def test_ill_conditioned_full_rank_fit_logs_warning():
    x1 = np.arange(1.0, 9.0)
    wiggle = np.array([1.0, -1.0] * 4)
    X = np.column_stack([x1, x1 + 1e-6 * wiggle])
    assert condition_number(X) > 1e6
    with capture_logs() as logs:
        model = OLSRegressor().fit(X, 3.0 + 2.0 * x1)
    assert model.rank_ == 3
    assert _warnings(logs) == ["ols_ill_conditioned"]
    event = [e for e in logs if e["event"] == "ols_ill_conditioned"][0]
    assert event["condition_number"] > 1e6


def test_well_conditioned_fit_logs_no_warning(linear_df):
    with capture_logs() as logs:
        OLSRegressor().fit(linear_df[["x1", "x2"]], linear_df["y"])
    assert _warnings(logs) == []
