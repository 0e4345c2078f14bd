"""
Synthetic sampling strategies.

Implements:
- SMOTE: minority interpolation between nearest same-class neighbours
  (imbalanced-learn SMOTE / SMOTENC / SMOTEN) combined with random
  down-sampling of the other classes.
- ROSE: smoothed bootstrap; every output row is drawn from a kernel density
  estimate of its class and perturbed with Gaussian noise.
"""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd
from imblearn.over_sampling import SMOTE, SMOTEN, SMOTENC

from subsample_cv.exceptions import DegenerateClassError
from subsample_cv.sampling.base import (
    Subsampler,
    categorical_columns,
    check_sampling_input,
    class_positions,
    synthetic_index,
)

logger = logging.getLogger("subsample_cv.sampling.synthetic")


class SmoteSampler(Subsampler):
    """SMOTE with majority down-sampling.

    For a minority class of ``n`` records, ``n * perc_over / 100`` synthetic
    records are generated by interpolating each minority record towards one
    of its ``k`` nearest minority neighbours. Every other class is then
    down-sampled (without replacement) to ``perc_under / 100`` times the
    number of synthetic records, capped at its size.

    Categorical columns are handled by SMOTENC (mixed data) or SMOTEN (all
    categorical); their distance definition is imbalanced-learn's.
    """

    name = "smote"

    def __init__(self, k: int = 5, perc_over: int = 200, perc_under: int = 200) -> None:
        if k < 1:
            raise ValueError(f"k must be >= 1, got {k}")
        if perc_over <= 0 or perc_under <= 0:
            raise ValueError("perc_over and perc_under must be positive")
        self.k = k
        self.perc_over = perc_over
        self.perc_under = perc_under

    def _oversampler(self, X: pd.DataFrame, k_neighbors: int, sampling_strategy, random_state):
        cat_cols = categorical_columns(X)
        if not cat_cols:
            return SMOTE(
                sampling_strategy=sampling_strategy,
                k_neighbors=k_neighbors,
                random_state=random_state,
            )
        if len(cat_cols) == X.shape[1]:
            return SMOTEN(
                sampling_strategy=sampling_strategy,
                k_neighbors=k_neighbors,
                random_state=random_state,
            )
        return SMOTENC(
            categorical_features=[X.columns.get_loc(c) for c in cat_cols],
            sampling_strategy=sampling_strategy,
            k_neighbors=k_neighbors,
            random_state=random_state,
        )

    def resample(self, X, y, random_state=None):
        counts = check_sampling_input(X, y)
        positions = class_positions(y)
        minority = min(counts, key=counts.get)
        n_minority = counts[minority]

        n_synthetic = int(n_minority * self.perc_over / 100)
        n_under = int(self.perc_under / 100 * n_synthetic)
        if n_synthetic == 0 or n_under == 0:
            raise DegenerateClassError(
                f"SMOTE ratios (perc_over={self.perc_over}, perc_under={self.perc_under}) "
                f"yield no records from {n_minority} minority records"
            )

        # SMOTENC needs categorical data it can one-hot encode
        cat_cols = categorical_columns(X)
        X_in = X.astype({c: object for c in cat_cols}).reset_index(drop=True)
        y_in = y.reset_index(drop=True)

        k_neighbors = min(self.k, n_minority - 1)
        oversampler = self._oversampler(
            X_in, k_neighbors, {minority: n_minority + n_synthetic}, random_state
        )
        X_res, y_res = oversampler.fit_resample(X_in, y_in)

        # fit_resample keeps the input rows first and appends synthetic rows
        X_new = pd.DataFrame(X_res, columns=X.columns).iloc[len(X_in):].copy()
        y_new = pd.Series(np.asarray(y_res)[len(y_in):], name=y.name)
        for c in cat_cols:
            X_new[c] = X_new[c].astype(X[c].dtype)
        X_new.index = synthetic_index(len(X_new))
        y_new.index = X_new.index

        rng = np.random.default_rng(random_state)
        keep = [positions[minority]]
        for label, pos in positions.items():
            if label == minority:
                continue
            keep.append(rng.choice(pos, size=min(n_under, len(pos)), replace=False))
        kept = np.concatenate(keep)

        X_out = pd.concat([X.iloc[kept], X_new])
        y_out = pd.concat([y.iloc[kept], y_new])
        order = rng.permutation(len(y_out))

        logger.debug(
            "SMOTE: %d minority + %d synthetic, %d rows per other class",
            n_minority, len(y_new), n_under,
        )
        return X_out.iloc[order], y_out.iloc[order]

    def __repr__(self) -> str:
        return f"SmoteSampler(k={self.k}, perc_over={self.perc_over}, perc_under={self.perc_under})"


class RoseSampler(Subsampler):
    """Random Over-Sampling Examples (smoothed bootstrap).

    Generates a fully synthetic training set of the same size as the input.
    The minority class makes up a share ``p`` of it; other classes split the
    remainder evenly. Each row is a bootstrap draw from its class with
    Gaussian noise added to numeric columns, using a per-column Silverman
    bandwidth scaled by ``shrink``. Categorical columns are drawn without
    noise.
    """

    name = "rose"

    def __init__(self, p: float = 0.5, shrink: float = 1.0) -> None:
        if not 0.0 < p < 1.0:
            raise ValueError("p must be between 0 and 1 (exclusive)")
        if shrink < 0:
            raise ValueError("shrink must be non-negative")
        self.p = p
        self.shrink = shrink

    def _target_sizes(self, counts: dict) -> dict:
        n_total = sum(counts.values())
        minority = min(counts, key=counts.get)
        others = [label for label in counts if label != minority]

        sizes = {minority: int(round(n_total * self.p))}
        remaining = n_total - sizes[minority]
        for i, label in enumerate(others):
            sizes[label] = remaining // len(others) + (1 if i < remaining % len(others) else 0)
        return sizes

    def resample(self, X, y, random_state=None):
        counts = check_sampling_input(X, y)
        rng = np.random.default_rng(random_state)
        sizes = self._target_sizes(counts)

        empty = [label for label, n in sizes.items() if n == 0]
        if empty:
            raise DegenerateClassError(
                f"ROSE with p={self.p} yields no records for classes {empty}"
            )

        numeric = [c for c in X.columns if c not in categorical_columns(X)]
        d = len(numeric)

        frames = []
        labels = []
        for label, pos in class_positions(y).items():
            n_out = sizes[label]
            drawn = X.iloc[rng.choice(pos, size=n_out, replace=True)].copy()
            if d:
                values = X.iloc[pos][numeric].to_numpy(dtype=float)
                n_c = len(pos)
                bandwidth = (4.0 / ((d + 2) * n_c)) ** (1.0 / (d + 4))
                scale = self.shrink * bandwidth * np.nanstd(values, axis=0, ddof=1)
                noise = rng.normal(size=(n_out, d)) * scale
                drawn[numeric] = drawn[numeric].to_numpy(dtype=float) + noise
            frames.append(drawn)
            labels.append(pd.Series([label] * n_out, name=y.name, dtype=y.dtype))

        X_out = pd.concat(frames)
        y_out = pd.concat(labels)
        order = rng.permutation(len(y_out))
        X_out = X_out.iloc[order]
        y_out = y_out.iloc[order]
        X_out.index = synthetic_index(len(X_out))
        y_out.index = X_out.index

        logger.debug("ROSE: generated %d synthetic rows, class sizes %s", len(y_out), sizes)
        return X_out, y_out

    def __repr__(self) -> str:
        return f"RoseSampler(p={self.p}, shrink={self.shrink})"
