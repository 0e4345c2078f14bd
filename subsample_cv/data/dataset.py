"""
Labeled dataset contract shared by the fold planner, executor and evaluators.

A Dataset holds a feature frame (mixed numeric / categorical columns) and a
label series aligned on a RangeIndex. Row labels are record identities: every
slice handed out keeps them, so downstream code can check which original
records a training or holdout slice contains.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Tuple

import numpy as np
import pandas as pd
from sklearn.model_selection import train_test_split


@dataclass(frozen=True)
class Dataset:
    """Immutable labeled dataset.

    Attributes:
        X: Feature frame, one row per record.
        y: Class label per record.
    """

    X: pd.DataFrame
    y: pd.Series

    def __post_init__(self) -> None:
        """Validate data integrity after initialization."""
        if len(self.X) != len(self.y):
            raise ValueError(
                f"Feature/label length mismatch: X={len(self.X)}, y={len(self.y)}"
            )
        if self.y.isna().any():
            raise ValueError("Every record must have exactly one label; found missing labels")
        if self.y.nunique() < 2:
            raise ValueError(
                f"Dataset needs at least 2 distinct labels, got {list(self.y.unique())}"
            )

        # Record identity is the row position in the original data
        X = self.X.reset_index(drop=True)
        y = self.y.reset_index(drop=True).rename(self.y.name or "y")
        object.__setattr__(self, "X", X)
        object.__setattr__(self, "y", y)

    @property
    def n_samples(self) -> int:
        """Number of records."""
        return len(self.y)

    @property
    def feature_names(self) -> List[str]:
        """Feature column names."""
        return list(self.X.columns)

    @property
    def class_counts(self) -> Dict[Any, int]:
        """Record count per class, largest first."""
        return {k: int(v) for k, v in self.y.value_counts().items()}

    @property
    def classes(self) -> List[Any]:
        """Sorted class labels."""
        return sorted(self.y.unique().tolist())

    @property
    def minority_label(self) -> Any:
        """Label of the smallest class."""
        return min(self.class_counts.items(), key=lambda kv: kv[1])[0]

    @property
    def majority_label(self) -> Any:
        """Label of the largest class."""
        return max(self.class_counts.items(), key=lambda kv: kv[1])[0]

    def subset(self, indices: np.ndarray) -> Tuple[pd.DataFrame, pd.Series]:
        """Return (X, y) rows at the given positions.

        Repeated indices (bootstrap) produce repeated rows that share the
        same record identity.
        """
        indices = np.asarray(indices, dtype=int)
        return self.X.iloc[indices], self.y.iloc[indices]

    def get_summary(self) -> dict:
        """Return summary statistics about the dataset."""
        counts = self.class_counts
        return {
            "n_samples": self.n_samples,
            "n_features": len(self.feature_names),
            "class_counts": counts,
            "minority_label": self.minority_label,
            "imbalance_ratio": max(counts.values()) / min(counts.values()),
            "feature_names": self.feature_names,
        }


def load_csv(path: Path | str, label_column: str = "y") -> Dataset:
    """Load a dataset from a CSV file.

    Args:
        path: CSV file with one row per record.
        label_column: Column holding the class label.

    Returns:
        Dataset with every other column as a feature.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Required file not found: {path}")

    df = pd.read_csv(path)
    if label_column not in df.columns:
        raise ValueError(f"{path.name} must have '{label_column}' column")

    return Dataset(X=df.drop(columns=[label_column]), y=df[label_column])


def train_test_split_dataset(
    dataset: Dataset,
    test_fraction: float = 0.25,
    random_seed: int = 42,
) -> Tuple[Dataset, Dataset]:
    """Stratified split into a training set and an external test set.

    The test set keeps the original class imbalance; it is never
    subsampled downstream.

    Args:
        dataset: Full dataset.
        test_fraction: Share of records placed in the test set.
        random_seed: Random seed for reproducibility.

    Returns:
        (train, test) datasets.
    """
    if not 0.0 < test_fraction < 1.0:
        raise ValueError("test_fraction must be between 0 and 1 (exclusive)")

    X_train, X_test, y_train, y_test = train_test_split(
        dataset.X,
        dataset.y,
        test_size=test_fraction,
        random_state=random_seed,
        stratify=dataset.y,
    )
    return Dataset(X=X_train, y=y_train), Dataset(X=X_test, y=y_test)
