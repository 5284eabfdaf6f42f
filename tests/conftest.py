"""
Pytest fixtures for dsci-ml tests: small synthetic datasets and an isolated
environment (models/plots written under tmp_path, default settings).
"""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

DSCI_ENV_VARS = (
    "DSCI_RANDOM_SEED",
    "DSCI_CV_FOLDS",
    "DSCI_TRAIN_SIZE",
    "DSCI_MODELS_DIR",
    "DSCI_PLOTS_DIR",
)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Default settings, with artifacts redirected to tmp_path."""
    for name in DSCI_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DSCI_MODELS_DIR", str(tmp_path / "models"))
    monkeypatch.setenv("DSCI_PLOTS_DIR", str(tmp_path / "plots"))


@pytest.fixture
def exact_line():
    """y = 2 + 3x with no noise."""
    x = np.arange(10, dtype=float)
    return x, 2.0 + 3.0 * x


@pytest.fixture
def linear_df():
    """Two predictors, y = 1.5 + 2*x1 - 0.5*x2 + small noise."""
    rng = np.random.default_rng(0)
    n = 200
    x1 = rng.uniform(0, 10, n)
    x2 = rng.uniform(-5, 5, n)
    y = 1.5 + 2.0 * x1 - 0.5 * x2 + rng.normal(0, 0.1, n)
    return pd.DataFrame({"x1": x1, "x2": x2, "y": y})


@pytest.fixture
def tumour_df():
    """
    Two well separated classes on predictors with very different units:
    perimeter (tens) and concavity (tenths).
    """
    rng = np.random.default_rng(42)
    n = 60
    benign = pd.DataFrame(
        {
            "perimeter": rng.normal(70, 6, n),
            "concavity": rng.normal(0.05, 0.02, n),
            "diagnosis": "benign",
        }
    )
    malignant = pd.DataFrame(
        {
            "perimeter": rng.normal(110, 8, n),
            "concavity": rng.normal(0.16, 0.03, n),
            "diagnosis": "malignant",
        }
    )
    return pd.concat([benign, malignant], ignore_index=True)


@pytest.fixture
def signal_noise_df():
    """One predictor that separates the classes and one that is pure noise."""
    rng = np.random.default_rng(7)
    n = 60
    labels = np.array(["no"] * n + ["yes"] * n)
    signal = np.concatenate([rng.normal(0, 1, n), rng.normal(6, 1, n)])
    noise = rng.normal(0, 1, 2 * n)
    return pd.DataFrame({"noise": noise, "signal": signal, "label": labels})


@pytest.fixture
def tumour_csv(tmp_path, tumour_df):
    path = tmp_path / "tumours.csv"
    tumour_df.to_csv(path, index=False)
    return path


@pytest.fixture
def linear_csv(tmp_path, linear_df):
    path = tmp_path / "linear.csv"
    linear_df.to_csv(path, index=False)
    return path
