"""Shared fixtures for the subsample-cv test suite."""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from subsample_cv.config import SimulationConfig
from subsample_cv.data.dataset import Dataset
from subsample_cv.data.simulation import ImbalancedGenerator
from subsample_cv.models.logistic_regression import LogisticRegressionTrainer
from subsample_cv.preprocessing.feature_pipeline import FeaturePipeline
from subsample_cv.sampling.base import Subsampler
from subsample_cv.sampling.random_samplers import DownSampler


def make_numeric_dataset(n_majority: int = 950, n_minority: int = 50, seed: int = 0) -> Dataset:
    """Two informative numeric columns, minority shifted by +1.5."""
    rng = np.random.default_rng(seed)
    n = n_majority + n_minority
    labels = np.array(["maj"] * n_majority + ["min"] * n_minority, dtype=object)
    rng.shuffle(labels)
    shift = np.where(labels == "min", 1.5, 0.0)
    X = pd.DataFrame({
        "a": rng.normal(size=n) + shift,
        "b": rng.normal(size=n) - shift,
        "c": rng.normal(size=n),
    })
    return Dataset(X=X, y=pd.Series(labels, name="label"))


class RecordingSampler(Subsampler):
    """Delegates to another sampler and records the index labels it is given."""

    name = "recording"

    def __init__(self, inner: Subsampler | None = None):
        self.inner = inner or DownSampler()
        self.seen: list[pd.Index] = []
        self.returned: list[pd.Index] = []

    def resample(self, X, y, random_state=None):
        self.seen.append(X.index.copy())
        X_out, y_out = self.inner.resample(X, y, random_state=random_state)
        self.returned.append(X_out.index.copy())
        return X_out, y_out


class RecordingPipeline(FeaturePipeline):
    """FeaturePipeline that records the index labels of every slice it is fit on."""

    def __init__(self, steps=None):
        super().__init__(steps)
        self.fit_indices: list[pd.Index] = []

    def fit(self, X):
        self.fit_indices.append(X.index.copy())
        return super().fit(X)


class FailingTrainer:
    """Trainer that always raises."""

    def train(self, X, y, hyperparameters=None):
        raise RuntimeError("solver diverged")


@pytest.fixture
def imbalanced_dataset() -> Dataset:
    """1000 records: 950 majority ("maj"), 50 minority ("min")."""
    return make_numeric_dataset()


@pytest.fixture
def small_dataset() -> Dataset:
    """200 records: 180 majority, 20 minority."""
    return make_numeric_dataset(n_majority=180, n_minority=20, seed=1)


@pytest.fixture
def mixed_dataset() -> Dataset:
    """Simulated mixed numeric / categorical data, 300 records, 10% minority."""
    cfg = SimulationConfig(
        random_seed=3,
        n_samples=300,
        minority_fraction=0.1,
        n_informative=3,
        n_noise=2,
    )
    return ImbalancedGenerator(cfg).generate()


@pytest.fixture
def lr_trainer() -> LogisticRegressionTrainer:
    return LogisticRegressionTrainer()
