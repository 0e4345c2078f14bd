"""
Evaluation metrics for imbalanced binary classification.

Implements:
- ROC AUC with a DeLong confidence interval
- Average precision (area under the precision-recall curve)
- Brier: Mean squared error of probability predictions

Every metric has the signature ``fn(y_true, y_score, positive_label)`` and
returns a MetricValue. Metrics that are undefined for the given labels raise
MetricComputationError; the fold executor records such folds as excluded.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import numpy as np
from scipy import stats
from sklearn.metrics import average_precision_score, brier_score_loss, roc_auc_score

from subsample_cv.exceptions import MetricComputationError


@dataclass(frozen=True)
class MetricValue:
    """Point estimate with an optional (lower, upper) interval."""

    value: float
    lower: Optional[float] = None
    upper: Optional[float] = None

    @property
    def has_interval(self) -> bool:
        return self.lower is not None and self.upper is not None


MetricFn = Callable[[np.ndarray, np.ndarray, Any], MetricValue]


@dataclass(frozen=True)
class Metric:
    """Named metric capability shared by the fold executor and test evaluator."""

    name: str
    fn: MetricFn
    greater_is_better: bool = True

    def __call__(self, y_true, y_score, positive_label) -> MetricValue:
        return self.fn(np.asarray(y_true), np.asarray(y_score, dtype=float), positive_label)


def _binarize(y_true: np.ndarray, y_score: np.ndarray, positive_label: Any) -> np.ndarray:
    """Return 0/1 labels, raising if either class is absent."""
    if len(y_true) != len(y_score):
        raise MetricComputationError(
            f"Label/score length mismatch: {len(y_true)} vs {len(y_score)}"
        )
    if not np.all(np.isfinite(y_score)):
        raise MetricComputationError("Scores contain NaN or infinite values")

    y_bin = (y_true == positive_label).astype(int)
    n_pos = int(y_bin.sum())
    if n_pos == 0 or n_pos == len(y_bin):
        raise MetricComputationError(
            f"Metric undefined: evaluation labels contain a single class "
            f"({n_pos} positive of {len(y_bin)})"
        )
    return y_bin


def delong_variance(y_bin: np.ndarray, y_score: np.ndarray) -> tuple[float, float]:
    """AUC and its DeLong variance estimate.

    Uses the structural components V10 (per positive) and V01 (per
    negative) of the Mann-Whitney statistic; ties count one half.

    Args:
        y_bin: Binary labels (1 = positive).
        y_score: Scores, higher meaning more likely positive.

    Returns:
        (auc, variance)
    """
    pos = y_score[y_bin == 1]
    neg = y_score[y_bin == 0]
    m, n = len(pos), len(neg)

    # psi[i, j] = 1 if pos_i > neg_j, 0.5 if tied, else 0
    psi = (pos[:, None] > neg[None, :]).astype(float)
    psi += 0.5 * (pos[:, None] == neg[None, :])

    v10 = psi.mean(axis=1)
    v01 = psi.mean(axis=0)
    auc = float(v10.mean())

    s10 = v10.var(ddof=1) if m > 1 else 0.0
    s01 = v01.var(ddof=1) if n > 1 else 0.0
    return auc, float(s10 / m + s01 / n)


def compute_auc(
    y_true: np.ndarray,
    y_score: np.ndarray,
    positive_label: Any,
    confidence: float = 0.95,
) -> MetricValue:
    """Compute ROC AUC with a DeLong confidence interval.

    Args:
        y_true: True class labels.
        y_score: Predicted probability of ``positive_label``.
        positive_label: Class treated as positive.
        confidence: Interval coverage.

    Returns:
        MetricValue with AUC in [0, 1] and interval clipped to [0, 1].
    """
    y_bin = _binarize(y_true, y_score, positive_label)
    auc = float(roc_auc_score(y_bin, y_score))
    _, variance = delong_variance(y_bin, y_score)

    z = stats.norm.ppf(0.5 + confidence / 2)
    half_width = z * np.sqrt(max(variance, 0.0))
    return MetricValue(
        value=auc,
        lower=float(max(0.0, auc - half_width)),
        upper=float(min(1.0, auc + half_width)),
    )


def compute_average_precision(
    y_true: np.ndarray,
    y_score: np.ndarray,
    positive_label: Any,
) -> MetricValue:
    """Compute average precision (PR AUC). No interval."""
    y_bin = _binarize(y_true, y_score, positive_label)
    return MetricValue(value=float(average_precision_score(y_bin, y_score)))


def compute_brier(
    y_true: np.ndarray,
    y_score: np.ndarray,
    positive_label: Any,
) -> MetricValue:
    """Compute Brier score (mean squared error of probabilities).

    Lower is better. Perfect calibration = 0.
    """
    y_bin = _binarize(y_true, y_score, positive_label)
    return MetricValue(value=float(brier_score_loss(y_bin, y_score)))


METRICS: Dict[str, Metric] = {
    "roc_auc": Metric("roc_auc", compute_auc, greater_is_better=True),
    "average_precision": Metric(
        "average_precision", compute_average_precision, greater_is_better=True
    ),
    "brier": Metric("brier", compute_brier, greater_is_better=False),
}


def get_metric(name: str) -> Metric:
    """Look up a metric by name."""
    key = name.lower()
    if key not in METRICS:
        raise ValueError(f"Unknown metric: {name}. Supported: {list(METRICS.keys())}")
    return METRICS[key]


def compute_metrics(
    y_true: np.ndarray,
    y_score: np.ndarray,
    metrics: List[str],
    positive_label: Any,
) -> Dict[str, MetricValue]:
    """Compute multiple evaluation metrics.

    Args:
        y_true: True class labels.
        y_score: Predicted probability of ``positive_label``.
        metrics: List of metric names to compute.
            Supported: "roc_auc", "average_precision", "brier".
        positive_label: Class treated as positive.

    Returns:
        Dictionary mapping metric name to value.
    """
    return {
        name.lower(): get_metric(name)(y_true, y_score, positive_label)
        for name in metrics
    }
