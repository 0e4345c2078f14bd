"""
Subsampler interface and shared helpers.

A subsampler maps a training slice (X, y) to a rebalanced (X', y'). Rows
drawn from the input keep their index labels (record identities); rows
synthesized from scratch get negative index labels so they can never alias
an original record.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Tuple

import numpy as np
import pandas as pd

from subsample_cv.exceptions import DegenerateClassError


SamplerFn = Callable[..., Tuple[pd.DataFrame, pd.Series]]


def check_sampling_input(X: pd.DataFrame, y: pd.Series) -> Dict[Any, int]:
    """Validate a training slice and return its class counts.

    Raises:
        ValueError: If X and y lengths differ.
        DegenerateClassError: If fewer than 2 classes are present or any
            class has fewer than 2 records.
    """
    if len(X) != len(y):
        raise ValueError(f"X and y must have the same length, got {len(X)} and {len(y)}")

    counts = {label: int(n) for label, n in y.value_counts(sort=False).items()}
    if len(counts) < 2:
        raise DegenerateClassError(
            f"Sampling needs at least 2 classes, got {list(counts)}"
        )
    small = {label: n for label, n in counts.items() if n < 2}
    if small:
        raise DegenerateClassError(f"Classes with fewer than 2 records: {small}")
    return counts


def class_positions(y: pd.Series) -> Dict[Any, np.ndarray]:
    """Map each class label to the row positions holding it.

    Classes appear in order of first occurrence so draws are deterministic
    for a given slice and seed.
    """
    values = y.to_numpy()
    return {label: np.flatnonzero(values == label) for label in pd.unique(values)}


def take_rows(
    X: pd.DataFrame, y: pd.Series, positions: np.ndarray
) -> Tuple[pd.DataFrame, pd.Series]:
    """Select rows by position, keeping their record identities."""
    return X.iloc[positions], y.iloc[positions]


def synthetic_index(n: int) -> pd.Index:
    """Index labels for synthesized rows: -1, -2, ..., -n."""
    return pd.Index(-np.arange(1, n + 1), dtype=int)


def categorical_columns(X: pd.DataFrame) -> list[str]:
    """Columns that cannot enter a distance metric directly."""
    return [c for c in X.columns if not pd.api.types.is_numeric_dtype(X[c])]


class Subsampler(ABC):
    """Stateless rebalancing transform applied to a training slice only."""

    name: str = "subsampler"

    @abstractmethod
    def resample(
        self,
        X: pd.DataFrame,
        y: pd.Series,
        random_state: Optional[int] = None,
    ) -> Tuple[pd.DataFrame, pd.Series]:
        """Return the rebalanced (X', y').

        Args:
            X: Training features.
            y: Training labels aligned with X.
            random_state: Seed for every random draw made by this call.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class NoSampler(Subsampler):
    """Identity strategy: the training slice is used as-is."""

    name = "none"

    def resample(self, X, y, random_state=None):
        return X, y


class FunctionSampler(Subsampler):
    """Wraps a user-supplied callable ``fn(X, y, random_state) -> (X', y')``."""

    def __init__(self, fn: SamplerFn, name: str = "custom") -> None:
        if not callable(fn):
            raise TypeError(f"Custom sampler must be callable, got {type(fn).__name__}")
        self.fn = fn
        self.name = name

    def resample(self, X, y, random_state=None):
        X_out, y_out = self.fn(X, y, random_state=random_state)
        if len(X_out) != len(y_out):
            raise ValueError(
                f"Custom sampler '{self.name}' returned X and y of different lengths "
                f"({len(X_out)} vs {len(y_out)})"
            )
        return X_out, y_out

    def __repr__(self) -> str:
        return f"FunctionSampler(name={self.name!r})"
