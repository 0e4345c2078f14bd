"""
Trainer / predictor contract consumed by the fold executor.

A Trainer turns a training slice and a hyperparameter dict into a fitted
Predictor; a Predictor returns a per-class probability table. The executor
treats both as black boxes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

import numpy as np
import pandas as pd
from sklearn.exceptions import NotFittedError as SklearnNotFittedError
from sklearn.utils.validation import check_is_fitted

from subsample_cv.exceptions import NotFittedError


def encode_features(X: pd.DataFrame, columns: Optional[List[str]] = None) -> pd.DataFrame:
    """One-hot encode non-numeric columns as float.

    When ``columns`` is given (the training columns), the result is aligned
    to them: unseen dummy columns are dropped and missing ones filled with 0.
    """
    encoded = pd.get_dummies(X, drop_first=False).astype(float)
    if columns is not None:
        encoded = encoded.reindex(columns=columns, fill_value=0.0)
    return encoded


class Predictor(ABC):
    """Fitted model scoring new records."""

    classes_: List[Any]

    @abstractmethod
    def predict_proba(self, X: pd.DataFrame) -> pd.DataFrame:
        """Return class probabilities.

        Args:
            X: Features with the training columns.

        Returns:
            Frame indexed like X with one column per class (rows sum to 1).
        """

    def positive_scores(self, X: pd.DataFrame, positive_label: Any) -> np.ndarray:
        """Probability of ``positive_label`` for each record."""
        return self.predict_proba(X)[positive_label].to_numpy()


@runtime_checkable
class Trainer(Protocol):
    """Anything with ``train(X, y, hyperparameters) -> Predictor``."""

    def train(
        self,
        X: pd.DataFrame,
        y: pd.Series,
        hyperparameters: Optional[Dict[str, Any]] = None,
    ) -> Predictor:
        ...


class LabelEncodedPredictor(Predictor):
    """Predictor over a scikit-learn style estimator trained on codes 0..n-1."""

    def __init__(self, estimator: Any, classes: List[Any], columns: List[str]) -> None:
        try:
            check_is_fitted(estimator)
        except SklearnNotFittedError as exc:
            raise NotFittedError(f"{type(estimator).__name__} must be fitted before wrapping") from exc
        self._estimator = estimator
        self.classes_ = list(classes)
        self.columns_ = list(columns)

    def predict_proba(self, X: pd.DataFrame) -> pd.DataFrame:
        features = encode_features(X, self.columns_)
        proba = self._estimator.predict_proba(features.to_numpy())
        return pd.DataFrame(proba, index=X.index, columns=self.classes_)


def encode_labels(y: pd.Series) -> tuple[np.ndarray, List[Any]]:
    """Map labels to integer codes; returns (codes, classes)."""
    classes = sorted(pd.unique(y.to_numpy()).tolist())
    lookup = {label: i for i, label in enumerate(classes)}
    return np.array([lookup[v] for v in y.to_numpy()], dtype=int), classes
