"""Tests for the evaluation metrics."""

import numpy as np
import pytest
from sklearn.metrics import roc_auc_score

from subsample_cv.evaluation.metrics import (
    METRICS,
    compute_auc,
    compute_brier,
    compute_metrics,
    delong_variance,
    get_metric,
)
from subsample_cv.exceptions import MetricComputationError


class TestAuc:
    def test_matches_sklearn(self):
        rng = np.random.default_rng(0)
        y = np.array(["neg"] * 80 + ["pos"] * 20)
        scores = rng.uniform(size=100) + (y == "pos") * 0.3
        value = compute_auc(y, scores, "pos")
        assert value.value == pytest.approx(roc_auc_score(y == "pos", scores))

    def test_interval_contains_estimate(self):
        rng = np.random.default_rng(1)
        y = np.array([0] * 150 + [1] * 50)
        scores = rng.normal(size=200) + y
        value = compute_auc(y, scores, 1)
        assert value.has_interval
        assert 0.0 <= value.lower < value.value < value.upper <= 1.0

    def test_interval_uses_normal_quantile(self):
        y = np.array([0, 0, 1, 1])
        scores = np.array([0.1, 0.4, 0.35, 0.8])
        half = np.sqrt(0.125)
        value = compute_auc(y, scores, 1)
        assert value.lower == pytest.approx(0.75 - 1.959964 * half, abs=1e-6)
        narrow = compute_auc(y, scores, 1, confidence=0.5)
        assert narrow.lower == pytest.approx(0.75 - 0.674490 * half, abs=1e-6)
        assert narrow.upper == pytest.approx(0.75 + 0.674490 * half, abs=1e-6)

    def test_perfect_separation_clipped(self):
        y = np.array([0, 0, 0, 1, 1])
        value = compute_auc(y, np.array([0.1, 0.2, 0.3, 0.8, 0.9]), 1)
        assert value.value == 1.0
        assert value.upper == 1.0

    def test_wider_interval_with_fewer_positives(self):
        rng = np.random.default_rng(2)
        y_many = np.array([0] * 500 + [1] * 500)
        y_few = np.array([0] * 990 + [1] * 10)
        s_many = rng.normal(size=1000) + y_many
        s_few = rng.normal(size=1000) + y_few
        many = compute_auc(y_many, s_many, 1)
        few = compute_auc(y_few, s_few, 1)
        assert (few.upper - few.lower) > (many.upper - many.lower)

    def test_single_class_raises(self):
        with pytest.raises(MetricComputationError, match="single class"):
            compute_auc(np.array([0, 0, 0]), np.array([0.1, 0.2, 0.3]), 1)

    def test_nan_scores_raise(self):
        with pytest.raises(MetricComputationError):
            compute_auc(np.array([0, 1]), np.array([np.nan, 0.2]), 1)

    def test_length_mismatch_raises(self):
        with pytest.raises(MetricComputationError):
            compute_auc(np.array([0, 1, 1]), np.array([0.1, 0.2]), 1)


def test_delong_variance_hand_computed():
    y = np.array([0, 0, 1, 1])
    scores = np.array([0.1, 0.4, 0.35, 0.8])
    auc, variance = delong_variance(y, scores)
    assert auc == pytest.approx(0.75)
    # V10 = [0.5, 1.0], V01 = [1.0, 0.5]; each has sample variance 0.125
    assert variance == pytest.approx(0.125 / 2 + 0.125 / 2)


def test_delong_ties_count_half():
    auc, _ = delong_variance(np.array([0, 1]), np.array([0.5, 0.5]))
    assert auc == pytest.approx(0.5)


def test_brier_lower_is_better():
    y = np.array([0, 0, 1, 1])
    good = compute_brier(y, np.array([0.1, 0.1, 0.9, 0.9]), 1)
    bad = compute_brier(y, np.array([0.5, 0.5, 0.5, 0.5]), 1)
    assert good.value < bad.value
    assert not METRICS["brier"].greater_is_better


def test_get_metric():
    assert get_metric("ROC_AUC").name == "roc_auc"
    with pytest.raises(ValueError, match="Unknown metric"):
        get_metric("accuracy")


def test_metric_callable_accepts_lists():
    value = get_metric("average_precision")(["a", "b", "b"], [0.1, 0.9, 0.8], "b")
    assert value.value == pytest.approx(1.0)
    assert not value.has_interval


def test_compute_metrics():
    y = np.array([0, 0, 1, 1])
    scores = np.array([0.1, 0.4, 0.35, 0.8])
    out = compute_metrics(y, scores, ["roc_auc", "brier"], 1)
    assert set(out) == {"roc_auc", "brier"}
    assert out["roc_auc"].value == pytest.approx(0.75)
