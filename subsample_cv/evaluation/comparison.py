"""
Side-by-side comparison of resampling and test-set estimates.

The absolute gap between the resampled metric and the test-set metric is
the diagnostic for optimism introduced by sampling: replicated records
(up-sampling) tend to produce the largest gap.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Tuple, Union

import pandas as pd

from subsample_cv.evaluation.orchestrator import ResamplingSummary
from subsample_cv.evaluation.test_evaluator import TestEstimate


@dataclass(frozen=True)
class ComparisonRow:
    strategy: str
    resampled: float
    resampled_std: float
    n_failed: int
    n_excluded: int
    test_estimate: float
    test_lower: Optional[float]
    test_upper: Optional[float]
    abs_diff: float


@dataclass(frozen=True)
class ComparisonReport:
    """Resampling summaries joined with test estimates by strategy name."""

    metric: str
    rows: Tuple[ComparisonRow, ...]

    def gap(self, strategy: str) -> float:
        """Absolute resampled-vs-test difference for one strategy."""
        for row in self.rows:
            if row.strategy == strategy:
                return row.abs_diff
        raise KeyError(strategy)

    @property
    def largest_gap(self) -> Optional[str]:
        """Strategy with the largest gap, ignoring strategies without one."""
        candidates = [r for r in self.rows if not math.isnan(r.abs_diff)]
        if not candidates:
            return None
        return max(candidates, key=lambda r: r.abs_diff).strategy

    def to_frame(self) -> pd.DataFrame:
        frame = pd.DataFrame([vars(r) for r in self.rows])
        frame.insert(1, "metric", self.metric)
        return frame


def compare(
    summaries: Mapping[str, ResamplingSummary],
    estimates: Union[Mapping[str, TestEstimate], Iterable[TestEstimate]],
) -> ComparisonReport:
    """Join resampling summaries and test estimates by strategy.

    Strategies present on only one side get NaN for the missing values and
    the gap.

    Args:
        summaries: Output of run_resampling().
        estimates: Test estimates, keyed by strategy or as an iterable.

    Returns:
        ComparisonReport, ordered as the summaries then any extra estimates.
    """
    if not isinstance(estimates, Mapping):
        estimates = {e.strategy: e for e in estimates}

    nan = float("nan")
    names = list(summaries) + [n for n in estimates if n not in summaries]
    metrics = {s.metric for s in summaries.values()} | {e.metric for e in estimates.values()}
    if len(metrics) > 1:
        raise ValueError(f"Cannot compare different metrics: {sorted(metrics)}")

    rows = []
    for name in names:
        summary = summaries.get(name)
        estimate = estimates.get(name)
        resampled = summary.mean if summary is not None else nan
        test_value = estimate.estimate if estimate is not None else nan
        rows.append(ComparisonRow(
            strategy=name,
            resampled=resampled,
            resampled_std=summary.std if summary is not None else nan,
            n_failed=summary.n_failed if summary is not None else 0,
            n_excluded=summary.n_excluded if summary is not None else 0,
            test_estimate=test_value,
            test_lower=estimate.lower if estimate is not None else None,
            test_upper=estimate.upper if estimate is not None else None,
            abs_diff=abs(resampled - test_value),
        ))

    return ComparisonReport(metric=metrics.pop() if metrics else "", rows=tuple(rows))


def summaries_to_frame(summaries: Mapping[str, ResamplingSummary]) -> pd.DataFrame:
    """One row per strategy."""
    return pd.DataFrame([s.to_dict() for s in summaries.values()])


def folds_to_frame(summaries: Mapping[str, ResamplingSummary]) -> pd.DataFrame:
    """All fold results of all strategies."""
    frames = [s.to_frame() for s in summaries.values() if s.fold_results]
    if not frames:
        return pd.DataFrame()
    return pd.concat(frames, ignore_index=True)


def estimates_to_frame(estimates: Mapping[str, TestEstimate]) -> pd.DataFrame:
    return pd.DataFrame([e.to_dict() for e in estimates.values()])

