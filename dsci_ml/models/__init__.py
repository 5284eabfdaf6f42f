"""
Versioned persistence of fitted models.
"""

from dsci_ml.models.save_model import load_latest_model, save_model

__all__ = ["load_latest_model", "save_model"]
