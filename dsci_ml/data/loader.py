"""
Dataset I/O: read a CSV from disk or a URL into a DataFrame, pick the
predictors and target, and split into training and test sets.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Sequence
from urllib.error import URLError

import pandas as pd
from pandas.api.types import is_numeric_dtype
from sklearn.model_selection import train_test_split

from dsci_ml.config import get_settings
from dsci_ml.core.exceptions import DatasetError, InvalidParameterError
from dsci_ml.dsci_logging import get_logger

logger = get_logger(__name__)

URL_PREFIXES = ("http://", "https://")


def _is_url(source: str | Path) -> bool:
    return isinstance(source, str) and source.strip().lower().startswith(URL_PREFIXES)


def load_dataset(
    source: str | Path,
    columns: Sequence[str] | None = None,
    *,
    dropna: bool = True,
    **read_csv_kwargs: Any,
) -> pd.DataFrame:
    """
    Read a CSV from a local path or http(s) URL.

    columns: keep only these columns (in this order). dropna: drop rows with a
    missing value in the kept columns. Extra keyword arguments go to
    pandas.read_csv (e.g. sep=";").
    Raises DatasetError when the file is missing/unreadable, a column is
    absent, or no rows remain.
    """
    if not _is_url(source):
        path = Path(source)
        if not path.is_file():
            raise DatasetError(f"Dataset CSV not found: {path}")
        source = path
    try:
        df = pd.read_csv(source, **read_csv_kwargs)
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as e:
        raise DatasetError(f"Could not parse dataset {source}: {e}") from e
    except (URLError, OSError) as e:
        raise DatasetError(f"Could not read dataset {source}: {e}") from e

    if columns is not None:
        missing = [c for c in columns if c not in df.columns]
        if missing:
            raise DatasetError(f"columns not in dataset: {missing}")
        df = df[list(columns)]

    rows_read = len(df)
    if dropna:
        df = df.dropna().reset_index(drop=True)
    if df.empty:
        raise DatasetError(f"Dataset empty: {source}")

    logger.info(
        "dataset_loaded",
        source=str(source),
        rows=len(df),
        rows_dropped=rows_read - len(df),
        columns=list(df.columns),
    )
    return df


def split_xy(
    df: pd.DataFrame,
    target: str,
    predictors: Sequence[str] | None = None,
) -> tuple[pd.DataFrame, pd.Series]:
    """
    Separate predictors and target. Predictors default to every other column
    and must be numeric (distances and least squares need numbers).
    """
    if target not in df.columns:
        raise DatasetError(f"target column not in dataset: {target!r}")
    if predictors is None:
        predictors = [c for c in df.columns if c != target]
    else:
        predictors = list(predictors)
    if not predictors:
        raise DatasetError("at least one predictor column is required")
    missing = [c for c in predictors if c not in df.columns]
    if missing:
        raise DatasetError(f"predictor columns not in dataset: {missing}")
    if target in predictors:
        raise DatasetError(f"target {target!r} cannot also be a predictor")
    non_numeric = [c for c in predictors if not is_numeric_dtype(df[c])]
    if non_numeric:
        raise DatasetError(f"predictor columns must be numeric: {non_numeric}")
    return df[predictors], df[target]


def _is_categorical(series: pd.Series) -> bool:
    return not is_numeric_dtype(series) or series.dtype == bool


def train_test_split_df(
    df: pd.DataFrame,
    target: str,
    train_size: float | None = None,
    *,
    stratify: bool | None = None,
    random_state: int | None = None,
) -> tuple[pd.DataFrame, pd.DataFrame]:
    """
    Split rows into (train_df, test_df).

    stratify=None stratifies on the target when it is categorical, so both
    sets keep the class proportions. train_size and random_state default to
    the configured DSCI_TRAIN_SIZE / DSCI_RANDOM_SEED.
    """
    settings = get_settings()
    train_size = settings.train_size if train_size is None else train_size
    random_state = settings.random_seed if random_state is None else random_state
    if not 0.0 < float(train_size) < 1.0:
        raise InvalidParameterError(f"train_size must be between 0 and 1, got {train_size}")
    if target not in df.columns:
        raise DatasetError(f"target column not in dataset: {target!r}")
    if stratify is None:
        stratify = _is_categorical(df[target])

    try:
        train_df, test_df = train_test_split(
            df,
            train_size=float(train_size),
            random_state=random_state,
            stratify=df[target] if stratify else None,
        )
    except ValueError as e:
        raise DatasetError(f"Could not split dataset: {e}") from e

    logger.info(
        "dataset_split",
        train_rows=len(train_df),
        test_rows=len(test_df),
        stratified=bool(stratify),
        random_state=random_state,
    )
    return train_df, test_df


def class_proportions(series: pd.Series) -> pd.DataFrame:
    """Count and percent of each class, sorted by class."""
    counts = series.value_counts().sort_index()
    total = int(counts.sum())
    return pd.DataFrame(
        {
            "class": counts.index.to_list(),
            "count": counts.to_numpy(dtype=int),
            "percent": (100.0 * counts.to_numpy(dtype=float) / total) if total else 0.0,
        }
    )
