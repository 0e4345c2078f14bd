"""Tests for the comparison reporter."""

import math

import pytest

from subsample_cv.evaluation.comparison import compare, folds_to_frame, summaries_to_frame
from subsample_cv.evaluation.executor import FoldResult, FoldStatus
from subsample_cv.evaluation.orchestrator import ResamplingSummary
from subsample_cv.evaluation.test_evaluator import TestEstimate


def summary(name, mean, metric="roc_auc", n_failed=0):
    return ResamplingSummary(strategy=name, metric=metric, mean=mean, n_failed=n_failed)


@pytest.fixture
def summaries():
    return {
        "original": summary("original", 0.80),
        "down": summary("down", 0.78, n_failed=1),
        "up": summary("up", 0.95),
    }


@pytest.fixture
def estimates():
    return {
        "original": TestEstimate("original", "roc_auc", 0.79, 0.70, 0.88),
        "down": TestEstimate("down", "roc_auc", 0.77, 0.68, 0.86),
        "up": TestEstimate("up", "roc_auc", 0.65, 0.55, 0.75),
    }


def test_gap_for_replicated_records(summaries, estimates):
    report = compare(summaries, estimates)
    assert report.gap("up") == pytest.approx(0.30)
    assert report.largest_gap == "up"


def test_rows_in_summary_order(summaries, estimates):
    report = compare(summaries, estimates)
    assert [r.strategy for r in report.rows] == ["original", "down", "up"]
    assert report.metric == "roc_auc"
    down = report.rows[1]
    assert down.n_failed == 1
    assert down.test_lower == 0.68


def test_accepts_iterable_of_estimates(summaries, estimates):
    report = compare(summaries, list(estimates.values()))
    assert report.gap("original") == pytest.approx(0.01)


def test_missing_estimate_gives_nan(summaries, estimates):
    del estimates["down"]
    report = compare(summaries, estimates)
    assert math.isnan(report.gap("down"))
    assert report.largest_gap == "up"


def test_unknown_strategy(summaries, estimates):
    with pytest.raises(KeyError):
        compare(summaries, estimates).gap("smote")


def test_mixed_metrics_rejected(summaries):
    with pytest.raises(ValueError, match="different metrics"):
        compare(summaries, [TestEstimate("up", "brier", 0.1)])


def test_no_gaps():
    report = compare({"a": summary("a", float("nan"))}, {})
    assert report.largest_gap is None


def test_to_frame(summaries, estimates):
    frame = compare(summaries, estimates).to_frame()
    assert list(frame["strategy"]) == ["original", "down", "up"]
    assert "abs_diff" in frame.columns
    assert set(frame["metric"]) == {"roc_auc"}


def test_summary_tables():
    result = FoldResult("up", 0, 0, 0, {}, FoldStatus.OK, value=0.9)
    summaries = {"up": ResamplingSummary("up", "roc_auc", 0.9, fold_results=(result,))}
    assert summaries_to_frame(summaries)["mean"].tolist() == [0.9]
    assert folds_to_frame(summaries)["value"].tolist() == [0.9]
    assert folds_to_frame({}).empty
