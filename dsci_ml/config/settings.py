"""
Application settings.

Settings is an immutable snapshot of the environment taken when
get_settings() is called; library functions take explicit arguments and
fall back to these values only when an argument is None.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from dsci_ml.config import env


@dataclass(frozen=True)
class Settings:
    random_seed: int
    cv_folds: int
    train_size: float
    models_dir: Path
    plots_dir: Path


def get_settings() -> Settings:
    """Return the current settings read from env (and .env)."""
    return Settings(
        random_seed=env.get_random_seed(),
        cv_folds=env.get_cv_folds(),
        train_size=env.get_train_size(),
        models_dir=env.get_models_dir(),
        plots_dir=env.get_plots_dir(),
    )
