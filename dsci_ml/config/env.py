"""
Environment variable loading and validation for dsci-ml.

- DSCI_RANDOM_SEED: seed for splits and fold shuffling (default: 1)
- DSCI_CV_FOLDS: number of cross-validation folds (default: 5)
- DSCI_TRAIN_SIZE: fraction of rows used for training (default: 0.75)
- DSCI_MODELS_DIR: where save_model writes artifacts (default: <root>/models)
- DSCI_PLOTS_DIR: where the CLI writes PNGs (default: <root>/plots)
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Project root: config is dsci_ml/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"

DEFAULT_RANDOM_SEED = 1
DEFAULT_CV_FOLDS = 5
DEFAULT_TRAIN_SIZE = 0.75


def load_dsci_env() -> None:
    """Load .env from project root. Existing environment variables win. Safe to call multiple times."""
    if _ENV_PATH.is_file():
        load_dotenv(_ENV_PATH, override=False)


def _get_int(name: str, default: int, minimum: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= minimum else default


def get_random_seed() -> int:
    """Return DSCI_RANDOM_SEED; non-integer or negative values fall back to the default."""
    load_dsci_env()
    return _get_int("DSCI_RANDOM_SEED", DEFAULT_RANDOM_SEED, 0)


def get_cv_folds() -> int:
    """Return DSCI_CV_FOLDS (at least 2)."""
    load_dsci_env()
    return _get_int("DSCI_CV_FOLDS", DEFAULT_CV_FOLDS, 2)


def get_train_size() -> float:
    """Return DSCI_TRAIN_SIZE, a fraction strictly between 0 and 1."""
    load_dsci_env()
    raw = (os.getenv("DSCI_TRAIN_SIZE") or "").strip()
    if not raw:
        return DEFAULT_TRAIN_SIZE
    try:
        value = float(raw)
    except ValueError:
        return DEFAULT_TRAIN_SIZE
    if not 0.0 < value < 1.0:
        return DEFAULT_TRAIN_SIZE
    return value


def get_models_dir() -> Path:
    """Return DSCI_MODELS_DIR or <root>/models."""
    load_dsci_env()
    raw = (os.getenv("DSCI_MODELS_DIR") or "").strip()
    return Path(raw) if raw else _ROOT / "models"


def get_plots_dir() -> Path:
    """Return DSCI_PLOTS_DIR or <root>/plots."""
    load_dsci_env()
    raw = (os.getenv("DSCI_PLOTS_DIR") or "").strip()
    return Path(raw) if raw else _ROOT / "plots"
