"""
Feature pipeline fit inside each fold.

Steps are applied per column type:
- numeric: impute (median), center, scale
- categorical: impute (most frequent), onehot

The pipeline is fit only on a training slice; the returned FittedPipeline
then transforms both that slice and the holdout slice.
"""

from __future__ import annotations

from typing import List, Sequence

import pandas as pd
from sklearn.compose import ColumnTransformer
from sklearn.impute import SimpleImputer
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import OneHotEncoder, StandardScaler

SUPPORTED_STEPS = ("impute", "center", "scale", "onehot")


class FittedPipeline:
    """Transform fitted on a training slice."""

    def __init__(
        self,
        transformer: ColumnTransformer | None,
        columns: List[str],
        categorical: List[str] | None = None,
    ):
        self._transformer = transformer
        self._columns = columns
        self._categorical = categorical or []

    def transform(self, X: pd.DataFrame) -> pd.DataFrame:
        """Transform features, keeping the row index (record identities).

        Args:
            X: Features with the columns seen during fit.

        Returns:
            Transformed feature frame.
        """
        missing = [c for c in self._columns if c not in X.columns]
        if missing:
            raise ValueError(f"Columns missing at transform time: {missing}")

        if self._transformer is None:
            return X[self._columns].copy()

        # sklearn imputers and encoders expect object, not pandas categorical
        X_in = X[self._columns].astype({c: object for c in self._categorical})
        out = self._transformer.transform(X_in)
        out.index = X.index
        return out

    @property
    def feature_names(self) -> List[str]:
        """Output column names."""
        if self._transformer is None:
            return list(self._columns)
        return list(self._transformer.get_feature_names_out())


class FeaturePipeline:
    """Ordered preprocessing steps, stateless until fit.

    With no steps the pipeline is a pass-through. Fitting returns a new
    FittedPipeline, so one FeaturePipeline can be shared across folds.
    """

    def __init__(self, steps: Sequence[str] | None = None):
        """Initialize pipeline.

        Args:
            steps: Ordered step names from SUPPORTED_STEPS.
        """
        steps = list(steps or [])
        unknown = [s for s in steps if s not in SUPPORTED_STEPS]
        if unknown:
            raise ValueError(f"Unknown preprocessing steps {unknown}. Supported: {SUPPORTED_STEPS}")
        self.steps = steps

    def _numeric_pipeline(self) -> Pipeline | None:
        parts = []
        for step in self.steps:
            if step == "impute":
                parts.append(("impute", SimpleImputer(strategy="median")))
            elif step == "center":
                parts.append(("center", StandardScaler(with_std=False)))
            elif step == "scale":
                parts.append(("scale", StandardScaler(with_mean=False)))
        return Pipeline(parts) if parts else None

    def _categorical_pipeline(self) -> Pipeline | None:
        parts = []
        for step in self.steps:
            if step == "impute":
                parts.append(("impute", SimpleImputer(strategy="most_frequent")))
            elif step == "onehot":
                parts.append((
                    "onehot",
                    OneHotEncoder(handle_unknown="ignore", sparse_output=False),
                ))
        return Pipeline(parts) if parts else None

    def fit(self, X: pd.DataFrame) -> FittedPipeline:
        """Fit the steps on a training slice.

        Args:
            X: Training features.

        Returns:
            FittedPipeline bound to the columns of X.
        """
        columns = list(X.columns)
        if not self.steps:
            return FittedPipeline(None, columns)

        numeric = [c for c in columns if pd.api.types.is_numeric_dtype(X[c])]
        categorical = [c for c in columns if c not in numeric]

        transformers = []
        num_pipe = self._numeric_pipeline()
        if numeric:
            transformers.append(("num", num_pipe or "passthrough", numeric))
        cat_pipe = self._categorical_pipeline()
        if categorical:
            transformers.append(("cat", cat_pipe or "passthrough", categorical))

        transformer = ColumnTransformer(
            transformers,
            remainder="drop",
            verbose_feature_names_out=False,
        ).set_output(transform="pandas")
        transformer.fit(X.astype({c: object for c in categorical}))
        return FittedPipeline(transformer, columns, categorical)

    def fit_transform(self, X: pd.DataFrame) -> tuple[FittedPipeline, pd.DataFrame]:
        """Fit on X and return (fitted pipeline, transformed X)."""
        fitted = self.fit(X)
        return fitted, fitted.transform(X)

    def __repr__(self) -> str:
        return f"FeaturePipeline(steps={self.steps})"

