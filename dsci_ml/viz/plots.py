"""
Plots for the regression and classification chapters.

Uses matplotlib's non-interactive Agg backend; every function saves a PNG
and returns its path, closing the figure afterwards.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import pandas as pd  # noqa: E402

from dsci_ml.core.exceptions import DatasetError, DataShapeError  # noqa: E402
from dsci_ml.dsci_logging import get_logger  # noqa: E402

logger = get_logger(__name__)

GRID_POINTS = 200


def _save(fig: plt.Figure, path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(path, dpi=100)
    plt.close(fig)
    logger.info("plot_saved", path=str(path))
    return path


def plot_regression_fit(
    x: Any,
    y: Any,
    model: Any,
    path: str | Path,
    *,
    xlabel: str = "x",
    ylabel: str = "y",
    title: str | None = None,
) -> Path:
    """
    Scatter of (x, y) with the model's predictions over the range of x.

    model must be fitted on a single predictor (OLS line or k-NN regression
    step curve). A DataFrame-fitted model gets the grid as a DataFrame with
    the same column name.
    """
    x_arr = np.asarray(x, dtype=np.float64).ravel()
    y_arr = np.asarray(y, dtype=np.float64).ravel()
    if x_arr.size == 0 or x_arr.size != y_arr.size:
        raise DataShapeError("x and y must be non-empty and the same length")

    grid = np.linspace(x_arr.min(), x_arr.max(), GRID_POINTS)
    name = getattr(x, "name", None)
    grid_input: Any = pd.DataFrame({name: grid}) if name is not None else grid.reshape(-1, 1)
    fitted = model.predict(grid_input)

    fig, ax = plt.subplots(figsize=(6, 4.5))
    ax.scatter(x_arr, y_arr, alpha=0.5, edgecolors="none", label="observations")
    ax.plot(grid, fitted, color="tab:red", linewidth=2, label="fit")
    ax.set_xlabel(xlabel)
    ax.set_ylabel(ylabel)
    if title:
        ax.set_title(title)
    ax.legend()
    return _save(fig, path)


def plot_tuning_curve(results: pd.DataFrame, path: str | Path, *, title: str | None = None) -> Path:
    """Mean cross-validation accuracy (or RMSPE) versus k, with ±1 standard error bars."""
    if results.empty:
        raise DataShapeError("tuning results are empty")
    metric = str(results["metric"].iloc[0])
    fig, ax = plt.subplots(figsize=(6, 4.5))
    ax.errorbar(
        results["n_neighbors"],
        results["mean"],
        yerr=results["std_err"],
        marker="o",
        capsize=3,
    )
    ax.set_xlabel("Neighbors")
    ax.set_ylabel("Accuracy estimate" if metric == "accuracy" else "RMSPE estimate")
    if title:
        ax.set_title(title)
    return _save(fig, path)


def plot_classes(
    df: pd.DataFrame,
    x: str,
    y: str,
    target: str,
    path: str | Path,
    *,
    title: str | None = None,
) -> Path:
    """Scatter of two predictors coloured by class."""
    missing = [c for c in (x, y, target) if c not in df.columns]
    if missing:
        raise DatasetError(f"columns not in dataset: {missing}")
    fig, ax = plt.subplots(figsize=(6, 4.5))
    for label, group in df.groupby(target, sort=True):
        ax.scatter(group[x], group[y], alpha=0.6, edgecolors="none", label=str(label))
    ax.set_xlabel(x)
    ax.set_ylabel(y)
    ax.legend(title=target)
    if title:
        ax.set_title(title)
    return _save(fig, path)
