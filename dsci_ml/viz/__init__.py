"""
Chapter plots written to PNG files.
"""

from dsci_ml.viz.plots import plot_classes, plot_regression_fit, plot_tuning_curve

__all__ = ["plot_classes", "plot_regression_fit", "plot_tuning_curve"]
