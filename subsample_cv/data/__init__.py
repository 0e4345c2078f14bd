"""
Data containers, simulation and fold planning.

This module provides:
- Dataset: Immutable labeled dataset with record identities
- load_csv / train_test_split_dataset: Loading and external test split
- ImbalancedGenerator: Simulated imbalanced two-class data
- Splitters: Repeated k-fold and bootstrap fold plans
"""

from subsample_cv.data.dataset import Dataset, load_csv, train_test_split_dataset
from subsample_cv.data.simulation import ImbalancedGenerator
from subsample_cv.data.splitters import (
    FoldPlan,
    Partition,
    create_bootstrap_splits,
    create_kfold_splits,
    plan_folds,
    validate_scheme,
)

__all__ = [
    "Dataset",
    "FoldPlan",
    "ImbalancedGenerator",
    "Partition",
    "create_bootstrap_splits",
    "create_kfold_splits",
    "load_csv",
    "plan_folds",
    "train_test_split_dataset",
    "validate_scheme",
]
