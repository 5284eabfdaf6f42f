"""
Versioned model saving.

Saves model (.joblib) and metadata (.json) with a UTC timestamp in the
filename. Never overwrites existing models.

Usage:
    from dsci_ml.models import save_model, load_latest_model
    save_model(pipeline, "knn_classifier", metrics={...}, feature_list=[...])
    model, metadata = load_latest_model()
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import joblib

from dsci_ml.config import get_settings
from dsci_ml.dsci_logging import get_logger

logger = get_logger(__name__)


def _timestamp() -> str:
    """Return YYYYMMDD_HHMMSS in UTC."""
    return datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")


def _json_safe(value: Any) -> Any:
    """numpy scalars -> Python numbers so metadata serializes."""
    if hasattr(value, "item"):
        return value.item()
    return value


def save_model(
    model: Any,
    name: str,
    metrics: dict[str, Any] | None = None,
    feature_list: list[str] | None = None,
    *,
    models_dir: Path | None = None,
) -> tuple[Path, Path, str]:
    """
    Save model and metadata with versioned filenames. Does not overwrite.

    Args:
        model: fitted estimator or Pipeline (joblib-serializable).
        name: Base name, e.g. "knn_classifier", "linear_regression".
        metrics: e.g. {"accuracy": 0.86, "best_k": 7} or {"rmspe": 12.3}.
        feature_list: Ordered predictor names used to fit the model.
        models_dir: Override output directory (default: DSCI_MODELS_DIR).

    Returns:
        (model_path, metadata_path, base_name) e.g. base_name="knn_classifier_20261018_093015".

    Raises:
        OSError: On write failure.
    """
    models_dir = Path(models_dir or get_settings().models_dir)
    models_dir.mkdir(parents=True, exist_ok=True)

    base = f"{name}_{_timestamp()}"
    suffix = 1
    while (models_dir / f"{base}.joblib").exists():
        base = f"{name}_{_timestamp()}_{suffix}"
        suffix += 1
    model_path = models_dir / f"{base}.joblib"
    metadata_path = models_dir / f"{base}.json"

    joblib.dump(model, model_path)
    logger.info("model_saved", path=str(model_path))

    metadata: dict[str, Any] = {
        "model_name": name,
        "model_class": type(model).__name__,
        "training_date": datetime.now(timezone.utc).isoformat(),
        "feature_count": len(feature_list) if feature_list else None,
        "metrics": {k: _json_safe(v) for k, v in (metrics or {}).items()},
    }
    if feature_list is not None:
        metadata["feature_list"] = list(feature_list)

    with open(metadata_path, "w", encoding="utf-8") as f:
        json.dump(metadata, f, indent=2)
    logger.info("metadata_saved", path=str(metadata_path))

    return model_path, metadata_path, base


def load_latest_model(
    models_dir: Path | None = None,
) -> tuple[Any, dict[str, Any] | None]:
    """
    Load the newest .joblib model from models_dir and its metadata.

    Sorts by modification time, then filename; newest first.
    Returns (model, metadata); metadata is None if no sidecar JSON.
    Returns (None, None) when the folder is missing or has no .joblib files.
    """
    models_dir = Path(models_dir or get_settings().models_dir)
    if not models_dir.is_dir():
        logger.warning("load_latest_model_models_dir_missing", path=str(models_dir))
        return None, None

    candidates = [p for p in models_dir.glob("*.joblib") if p.is_file()]
    if not candidates:
        logger.warning("load_latest_model_no_joblib", path=str(models_dir))
        return None, None

    latest = max(candidates, key=lambda p: (p.stat().st_mtime, p.name))
    try:
        model = joblib.load(latest)
    except Exception as e:
        logger.error("load_latest_model_load_failed", path=str(latest), error=str(e))
        return None, None

    metadata_path = latest.with_suffix(".json")
    metadata: dict[str, Any] | None = None
    if metadata_path.is_file():
        try:
            with open(metadata_path, encoding="utf-8") as f:
                metadata = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("load_latest_model_metadata_failed", path=str(metadata_path), error=str(e))

    logger.info("load_latest_model_loaded", path=str(latest), has_metadata=metadata is not None)
    return model, metadata
