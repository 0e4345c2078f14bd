"""
Resampling orchestrator.

Plans folds once, replays the same plan for every sampling strategy and runs
each (fold, strategy) unit through the fold executor. Units share no mutable
state, so they are dispatched to a joblib worker pool; results are grouped by
strategy and summarized only after all of that strategy's units return.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from sklearn.model_selection import ParameterGrid
from tqdm import tqdm

from subsample_cv.config import ResamplingSchemeConfig
from subsample_cv.data.dataset import Dataset
from subsample_cv.data.splitters import FoldPlan, plan_folds
from subsample_cv.evaluation.executor import FoldResult, FoldStatus, execute_fold
from subsample_cv.evaluation.metrics import Metric
from subsample_cv.exceptions import InvalidSchemeError
from subsample_cv.models.base import Trainer
from subsample_cv.preprocessing.feature_pipeline import FeaturePipeline
from subsample_cv.sampling.strategy import SamplingStrategy

logger = logging.getLogger("subsample_cv.evaluation.orchestrator")


@dataclass(frozen=True)
class ResamplingSummary:
    """Aggregated fold results for one sampling strategy.

    ``mean``, ``std`` and ``values`` describe the selected (best) candidate
    over the folds where its metric was computed. Failed and excluded folds
    are counted, never silently dropped.
    """

    strategy: str
    metric: str
    mean: float
    std: float = float("nan")
    values: np.ndarray = field(default_factory=lambda: np.array([], dtype=float))
    best_candidate: Optional[int] = None
    best_hyperparameters: Dict[str, Any] = field(default_factory=dict)
    candidate_means: Dict[int, float] = field(default_factory=dict)
    n_folds: int = 0
    n_ok: int = 0
    n_failed: int = 0
    n_excluded: int = 0
    failures_by_kind: Dict[str, int] = field(default_factory=dict)
    fold_results: Tuple[FoldResult, ...] = ()

    @classmethod
    def from_fold_results(
        cls,
        strategy: str,
        results: Sequence[FoldResult],
        metric: Metric,
    ) -> ResamplingSummary:
        """Summarize all fold results of one strategy.

        The best candidate maximizes (or, for loss-type metrics, minimizes)
        the mean over its successful folds. If no candidate has a successful
        fold, candidate 0 is reported with a NaN mean.
        """
        by_candidate: Dict[int, List[FoldResult]] = {}
        for result in results:
            by_candidate.setdefault(result.candidate_id, []).append(result)

        candidate_means = {}
        for cid, rows in sorted(by_candidate.items()):
            ok_values = [r.value for r in rows if r.ok]
            if ok_values:
                candidate_means[cid] = float(np.mean(ok_values))

        best = None
        if candidate_means:
            pick = max if metric.greater_is_better else min
            best = pick(candidate_means, key=candidate_means.get)

        selected = best if best is not None else min(by_candidate, default=0)
        rows = by_candidate.get(selected, [])
        values = np.array([r.value for r in rows if r.ok], dtype=float)
        failures = Counter(r.error_kind for r in rows if not r.ok)

        return cls(
            strategy=strategy,
            metric=metric.name,
            mean=float(values.mean()) if values.size else float("nan"),
            std=float(values.std(ddof=1)) if values.size > 1 else float("nan"),
            values=values,
            best_candidate=best,
            best_hyperparameters=dict(rows[0].hyperparameters) if rows else {},
            candidate_means=candidate_means,
            n_folds=len(rows),
            n_ok=int(values.size),
            n_failed=sum(1 for r in rows if r.status is FoldStatus.FAILED),
            n_excluded=sum(1 for r in rows if r.status is FoldStatus.EXCLUDED),
            failures_by_kind=dict(failures),
            fold_results=tuple(results),
        )

    def to_frame(self) -> pd.DataFrame:
        """Per-fold results for every candidate."""
        return pd.DataFrame([r.to_row() for r in self.fold_results])

    def to_dict(self) -> Dict[str, Any]:
        """Summary row for tabular output."""
        return {
            "strategy": self.strategy,
            "metric": self.metric,
            "mean": self.mean,
            "std": self.std,
            "best_candidate": self.best_candidate,
            "best_hyperparameters": self.best_hyperparameters,
            "n_folds": self.n_folds,
            "n_ok": self.n_ok,
            "n_failed": self.n_failed,
            "n_excluded": self.n_excluded,
        }


def expand_param_grid(param_grid: Optional[Mapping[str, Sequence[Any]]]) -> List[Dict[str, Any]]:
    """Expand a hyperparameter grid into candidate dicts.

    An empty or missing grid yields a single candidate using trainer defaults.
    """
    if not param_grid:
        return [{}]
    return [dict(params) for params in ParameterGrid(dict(param_grid))]


def _check_strategies(strategies: Sequence[SamplingStrategy]) -> None:
    if not strategies:
        raise InvalidSchemeError("At least one sampling strategy is required")
    counts = Counter(s.name for s in strategies)
    duplicates = [name for name, n in counts.items() if n > 1]
    if duplicates:
        raise InvalidSchemeError(f"Sampling strategy names must be unique, got duplicates {duplicates}")


def run_resampling(
    dataset: Dataset,
    scheme: ResamplingSchemeConfig,
    strategies: Iterable[SamplingStrategy],
    trainer: Trainer,
    metric: Metric,
    pipeline: Optional[FeaturePipeline] = None,
    param_grid: Optional[Mapping[str, Sequence[Any]]] = None,
    positive_label: Any = None,
    n_jobs: int = 1,
    timeout: Optional[float] = None,
    show_progress: bool = False,
    plan: Optional[FoldPlan] = None,
) -> Dict[str, ResamplingSummary]:
    """Run every strategy over the same fold plan and summarize.

    Args:
        dataset: Training dataset (read-only, shared by all workers).
        scheme: Resampling scheme; its seed drives the fold plan and every
            per-fold sampling seed.
        strategies: Strategies to compare (unique names).
        trainer: External trainer.
        metric: Metric computed on each holdout slice.
        pipeline: Preprocessing steps fit inside each fold.
        param_grid: Hyperparameter grid tuned inside the loop.
        positive_label: Class scored as positive; minority class if None.
        n_jobs: joblib worker count (-2 = all cores but one).
        timeout: Optional per-unit timeout in seconds, passed to joblib.
        show_progress: Whether to show a progress bar.
        plan: Precomputed fold plan; built from ``scheme`` if None.

    Returns:
        Mapping of strategy name to ResamplingSummary, in input order.

    Raises:
        InvalidSchemeError: Before any fold runs, if the scheme or strategy
            list is invalid.
    """
    strategies = list(strategies)
    _check_strategies(strategies)

    if positive_label is None:
        positive_label = dataset.minority_label
    elif positive_label not in dataset.classes:
        raise InvalidSchemeError(
            f"positive_label {positive_label!r} not among classes {dataset.classes}"
        )

    if plan is None:
        plan = plan_folds(dataset.n_samples, scheme, dataset.y.to_numpy())
    candidates = expand_param_grid(param_grid)
    pipeline = pipeline or FeaturePipeline()

    units = [(strategy, partition) for strategy in strategies for partition in plan]
    logger.info(
        "Running %d strategies x %d partitions x %d candidates (n_jobs=%d)",
        len(strategies), len(plan), len(candidates), n_jobs,
    )

    outputs = Parallel(n_jobs=n_jobs, timeout=timeout, return_as="generator")(
        delayed(execute_fold)(
            dataset,
            partition,
            strategy,
            trainer,
            metric,
            pipeline=pipeline,
            candidates=candidates,
            positive_label=positive_label,
            base_seed=scheme.seed,
        )
        for strategy, partition in units
    )
    # Advances as units complete
    outputs = tqdm(outputs, total=len(units), desc="Resampling units", disable=not show_progress)

    grouped: Dict[str, List[FoldResult]] = {s.name: [] for s in strategies}
    for fold_results in outputs:
        for result in fold_results:
            grouped[result.strategy].append(result)

    summaries = {}
    for name, results in grouped.items():
        summary = ResamplingSummary.from_fold_results(name, results, metric)
        summaries[name] = summary
        logger.info(
            "strategy=%s %s=%.4f (ok=%d failed=%d excluded=%d of %d folds)",
            name, metric.name, summary.mean, summary.n_ok,
            summary.n_failed, summary.n_excluded, summary.n_folds,
        )
    return summaries
