"""
Application-level exceptions.

Every error raised on purpose by dsci_ml derives from DsciError, so the CLI
can report it with one except clause. Input problems also derive from
ValueError, and ModelNotFittedError from sklearn's NotFittedError, so code
written against scikit-learn conventions keeps catching them.
"""

from __future__ import annotations

from sklearn.exceptions import NotFittedError


class DsciError(Exception):
    """Base class for dsci_ml errors."""


class DatasetError(DsciError, ValueError):
    """Dataset could not be read, or lacks the requested columns."""


class DataShapeError(DsciError, ValueError):
    """Arrays are empty, mismatched, non-finite or degenerate."""


class InvalidParameterError(DsciError, ValueError):
    """A hyperparameter or option is out of range."""


class ModelNotFittedError(DsciError, NotFittedError):
    """predict/score called before fit."""

    def __init__(self, name: str) -> None:
        super().__init__(f"{name} is not fitted yet; call fit() first")
        self.name = name
