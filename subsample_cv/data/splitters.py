"""
Fold planning for resampling-based model evaluation.

Implements:
- Repeated k-fold partitions (stratified by default)
- Bootstrap partitions with out-of-bag holdout

A FoldPlan is built once per (scheme, seed) and replayed for every sampling
strategy under comparison, so all strategies see identical partitions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

import numpy as np
from sklearn.model_selection import KFold, StratifiedKFold

from subsample_cv.config import ResamplingSchemeConfig
from subsample_cv.exceptions import InvalidSchemeError


@dataclass(frozen=True)
class Partition:
    """Train/holdout indices for one fold of one repeat.

    Stores indices rather than data. Bootstrap train indices may contain
    duplicates; holdout indices never overlap train indices.
    """

    repeat_id: int
    fold_id: int
    train_idx: np.ndarray
    holdout_idx: np.ndarray

    def __post_init__(self) -> None:
        overlap = np.intersect1d(self.train_idx, self.holdout_idx)
        if overlap.size > 0:
            raise InvalidSchemeError(
                f"Partition {self.key} leaks {overlap.size} holdout records into train"
            )

    @property
    def key(self) -> str:
        """Human-readable key like "repeat=2|fold=3"."""
        return f"repeat={self.repeat_id}|fold={self.fold_id}"


@dataclass(frozen=True)
class FoldPlan:
    """Ordered sequence of partitions produced by plan_folds()."""

    scheme: ResamplingSchemeConfig
    n_samples: int
    partitions: Tuple[Partition, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.partitions)

    def __iter__(self) -> Iterator[Partition]:
        return iter(self.partitions)

    def __getitem__(self, i: int) -> Partition:
        return self.partitions[i]


def create_kfold_splits(
    n_samples: int,
    n_folds: int,
    random_seed: int,
    y: Optional[np.ndarray] = None,
) -> List[Tuple[np.ndarray, np.ndarray]]:
    """Create shuffled k-fold train/holdout splits.

    Args:
        n_samples: Number of records.
        n_folds: Number of folds.
        random_seed: Random seed for the shuffle.
        y: Labels. When given, folds are stratified on them.

    Returns:
        List of (train_indices, holdout_indices) tuples.
    """
    indices = np.arange(n_samples)
    if y is None:
        kf = KFold(n_splits=n_folds, shuffle=True, random_state=random_seed)
        return [(train_idx, val_idx) for train_idx, val_idx in kf.split(indices)]

    skf = StratifiedKFold(n_splits=n_folds, shuffle=True, random_state=random_seed)
    try:
        return [(train_idx, val_idx) for train_idx, val_idx in skf.split(indices, y)]
    except ValueError as exc:
        raise InvalidSchemeError(f"Cannot build {n_folds} stratified folds: {exc}") from exc


def create_bootstrap_splits(
    n_samples: int,
    n_bootstraps: int,
    random_seed: int,
    y: Optional[np.ndarray] = None,
) -> List[Tuple[np.ndarray, np.ndarray]]:
    """Create bootstrap resamples with out-of-bag holdout.

    Args:
        n_samples: Number of records.
        n_bootstraps: Number of bootstrap resamples.
        random_seed: Random seed for reproducibility.
        y: Labels. When given, each class is resampled within itself so the
            in-bag class counts match the full data.

    Returns:
        List of (in_bag_indices, out_of_bag_indices) tuples.
    """
    rng = np.random.default_rng(random_seed)
    all_idx = np.arange(n_samples)

    if y is None:
        strata = [all_idx]
    else:
        y = np.asarray(y)
        strata = [all_idx[y == label] for label in np.unique(y)]

    splits = []
    for _ in range(n_bootstraps):
        in_bag = np.concatenate([
            rng.choice(members, size=len(members), replace=True) for members in strata
        ])
        in_bag.sort()
        out_of_bag = np.setdiff1d(all_idx, in_bag)
        splits.append((in_bag, out_of_bag))
    return splits


def validate_scheme(n_samples: int, scheme: ResamplingSchemeConfig) -> None:
    """Raise InvalidSchemeError if the scheme cannot be applied.

    Called before any fold runs.
    """
    if n_samples < 2:
        raise InvalidSchemeError(f"Need at least 2 records to resample, got {n_samples}")

    if scheme.kind == "kfold":
        if scheme.k < 2:
            raise InvalidSchemeError(f"k must be >= 2, got {scheme.k}")
        if scheme.k > n_samples:
            raise InvalidSchemeError(
                f"k={scheme.k} exceeds the number of records ({n_samples})"
            )
        if scheme.repeats < 1:
            raise InvalidSchemeError(f"repeats must be >= 1, got {scheme.repeats}")
    elif scheme.kind == "bootstrap":
        if scheme.n_bootstraps < 1:
            raise InvalidSchemeError(
                f"n_bootstraps must be >= 1, got {scheme.n_bootstraps}"
            )
    else:
        raise InvalidSchemeError(f"Unknown resampling kind: {scheme.kind}")


def plan_folds(
    n_samples: int,
    scheme: ResamplingSchemeConfig,
    y: Optional[np.ndarray] = None,
) -> FoldPlan:
    """Build the fold plan for a dataset.

    Repeat r of a k-fold scheme is shuffled with seed ``scheme.seed + r``.
    Identical arguments always produce an identical plan.

    Args:
        n_samples: Number of records.
        scheme: Resampling scheme (kind, k, repeats, n_bootstraps, seed).
        y: Labels, used only when ``scheme.stratified`` is set.

    Returns:
        FoldPlan with ``scheme.n_partitions`` partitions.

    Raises:
        InvalidSchemeError: If the scheme does not fit the dataset.
    """
    validate_scheme(n_samples, scheme)

    strata = None
    if scheme.stratified and y is not None:
        strata = np.asarray(y)
        if len(strata) != n_samples:
            raise InvalidSchemeError(
                f"Label count ({len(strata)}) does not match n_samples ({n_samples})"
            )

    partitions = []
    if scheme.kind == "kfold":
        for repeat_id in range(scheme.repeats):
            repeat_seed = scheme.seed + repeat_id
            splits = create_kfold_splits(n_samples, scheme.k, repeat_seed, strata)
            for fold_id, (train_idx, holdout_idx) in enumerate(splits):
                partitions.append(Partition(repeat_id, fold_id, train_idx, holdout_idx))
    else:
        splits = create_bootstrap_splits(n_samples, scheme.n_bootstraps, scheme.seed, strata)
        for boot_id, (train_idx, holdout_idx) in enumerate(splits):
            partitions.append(Partition(0, boot_id, train_idx, holdout_idx))

    return FoldPlan(scheme=scheme, n_samples=n_samples, partitions=tuple(partitions))
