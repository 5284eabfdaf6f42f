"""
Linear regression by ordinary least squares.
"""

from dsci_ml.regression.ols import OLSRegressor, condition_number, fit_simple_ols

__all__ = ["OLSRegressor", "condition_number", "fit_simple_ols"]
