"""
Dataset loading and train/test splitting.
"""

from dsci_ml.data.loader import (
    class_proportions,
    load_dataset,
    split_xy,
    train_test_split_df,
)

__all__ = ["class_proportions", "load_dataset", "split_xy", "train_test_split_df"]
