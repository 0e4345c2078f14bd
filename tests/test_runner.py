"""End-to-end tests for the sampling comparison study."""

import math

import numpy as np
import pytest

from subsample_cv.config import (
    ExperimentConfig,
    PreprocessingConfig,
    ResamplingSchemeConfig,
    SamplingConfig,
    SimulationConfig,
    XGBoostConfig,
)
from subsample_cv.data import ImbalancedGenerator
from subsample_cv.experiments import build_strategies, run_imbalance_study
from subsample_cv.sampling import custom_strategy


@pytest.fixture
def train_test():
    cfg = SimulationConfig(random_seed=11, n_samples=300, minority_fraction=0.1,
                           n_informative=3, n_noise=2, separation=1.5)
    return ImbalancedGenerator(cfg).generate_train_test(n_test=300)


def study_config(**overrides):
    base = dict(
        scheme=ResamplingSchemeConfig(k=3, repeats=1, seed=0),
        sampling=[
            SamplingConfig(strategy="none"),
            SamplingConfig(strategy="down"),
            SamplingConfig(strategy="up"),
            SamplingConfig(strategy="smote", order="after"),
            SamplingConfig(strategy="rose"),
        ],
        preprocessing=PreprocessingConfig(steps=["impute", "center", "scale", "onehot"]),
        model="logistic_regression",
    )
    base.update(overrides)
    return ExperimentConfig(**base)


def test_full_study(train_test):
    train, test = train_test
    result = run_imbalance_study(train, test, study_config(), show_progress=False)

    names = ["original", "down", "up", "smote", "rose"]
    assert list(result.summaries) == names
    assert set(result.estimates) == set(names)
    assert [r.strategy for r in result.comparison.rows] == names
    for row in result.comparison.rows:
        assert 0.0 <= row.test_estimate <= 1.0
        assert row.abs_diff == pytest.approx(abs(row.resampled - row.test_estimate))
    assert result.comparison.largest_gap in names
    assert result.final_failures == {}


def test_custom_strategy_included(train_test):
    train, test = train_test

    def every_other_majority(X, y, random_state=None):
        majority = (y == y.value_counts().idxmax()).to_numpy()
        keep = ~majority | (np.arange(len(y)) % 2 == 0)
        return X[keep], y[keep]

    extra = custom_strategy("thin_majority", every_other_majority)
    cfg = study_config(sampling=[SamplingConfig(strategy="none")])
    result = run_imbalance_study(train, test, cfg, custom_strategies=[extra], show_progress=False)
    assert list(result.summaries) == ["original", "thin_majority"]
    assert "thin_majority" in result.estimates


def test_tuning_feeds_final_fit(train_test):
    train, test = train_test
    cfg = study_config(sampling=[SamplingConfig(strategy="down")], param_grid={"C": [0.01, 1.0]})
    result = run_imbalance_study(train, test, cfg, show_progress=False)
    summary = result.summaries["down"]
    assert summary.best_hyperparameters in ({"C": 0.01}, {"C": 1.0})
    assert len(summary.fold_results) == 6


def test_xgboost_study(train_test):
    train, test = train_test
    cfg = study_config(
        model="xgboost",
        xgboost=XGBoostConfig(n_estimators=10),
        sampling=[SamplingConfig(strategy="none"), SamplingConfig(strategy="up")],
    )
    result = run_imbalance_study(train, test, cfg, show_progress=False)
    assert set(result.estimates) == {"original", "up"}


def test_output_tables(train_test):
    train, test = train_test
    cfg = study_config(sampling=[SamplingConfig(strategy="none"), SamplingConfig(strategy="down")])
    frames = run_imbalance_study(train, test, cfg, show_progress=False).to_frames()
    assert set(frames) == {"summary", "folds", "test_estimates", "comparison"}
    assert len(frames["summary"]) == 2
    assert len(frames["folds"]) == 6
    assert not frames["comparison"]["abs_diff"].map(math.isnan).any()


def test_build_strategies_appends_custom():
    cfg = study_config(sampling=[SamplingConfig(strategy="down")])
    extra = custom_strategy("same", lambda X, y, random_state=None: (X, y))
    assert [s.name for s in build_strategies(cfg, [extra])] == ["down", "same"]


def test_final_fit_failure_recorded(train_test):
    train, test = train_test

    def broken(X, y, random_state=None):
        raise ValueError("custom sampler blew up")

    cfg = study_config(sampling=[SamplingConfig(strategy="none")])
    result = run_imbalance_study(
        train, test, cfg, custom_strategies=[custom_strategy("broken", broken)], show_progress=False
    )
    assert "original" in result.estimates
    assert "broken" not in result.estimates
    assert result.final_failures["broken"].startswith("sampling_failure:")
    assert result.summaries["broken"].n_failed == 3
