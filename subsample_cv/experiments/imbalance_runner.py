"""
Sampling comparison study.

For each sampling strategy:
- Estimate = resampled metric over the shared fold plan (sampling inside
  the loop, best hyperparameter candidate)
- Truth = metric of a final model (sampled once, full training set) on an
  untouched external test set

The gap between the two exposes optimism introduced by the sampling method.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

import pandas as pd

from subsample_cv.config import ExperimentConfig
from subsample_cv.data.dataset import Dataset
from subsample_cv.evaluation.comparison import (
    ComparisonReport,
    compare,
    estimates_to_frame,
    folds_to_frame,
    summaries_to_frame,
)
from subsample_cv.evaluation.metrics import get_metric
from subsample_cv.evaluation.orchestrator import ResamplingSummary, run_resampling
from subsample_cv.evaluation.test_evaluator import TestEstimate, evaluate, fit_final_model
from subsample_cv.exceptions import FoldError
from subsample_cv.models import build_trainer
from subsample_cv.preprocessing.feature_pipeline import FeaturePipeline
from subsample_cv.sampling.strategy import SamplingStrategy, build_strategy

logger = logging.getLogger("subsample_cv.experiments.imbalance_runner")


@dataclass
class StudyResult:
    """Outputs of run_imbalance_study()."""

    summaries: Dict[str, ResamplingSummary]
    estimates: Dict[str, TestEstimate]
    comparison: ComparisonReport
    final_failures: Dict[str, str] = field(default_factory=dict)

    def to_frames(self) -> Dict[str, pd.DataFrame]:
        """Tables keyed by output file stem."""
        return {
            "summary": summaries_to_frame(self.summaries),
            "folds": folds_to_frame(self.summaries),
            "test_estimates": estimates_to_frame(self.estimates),
            "comparison": self.comparison.to_frame(),
        }


def build_strategies(
    cfg: ExperimentConfig,
    custom_strategies: Iterable[SamplingStrategy] = (),
) -> List[SamplingStrategy]:
    """Built-in strategies from config followed by custom ones."""
    return [build_strategy(s) for s in cfg.sampling] + list(custom_strategies)


def run_imbalance_study(
    train: Dataset,
    test: Dataset,
    cfg: ExperimentConfig,
    custom_strategies: Iterable[SamplingStrategy] = (),
    show_progress: bool = True,
) -> StudyResult:
    """Run the full comparison study.

    Args:
        train: Training set used for resampling and the final fits.
        test: External test set (never subsampled).
        cfg: Experiment configuration.
        custom_strategies: Extra user-defined strategies.
        show_progress: Whether to show a progress bar.

    Returns:
        StudyResult with summaries, test estimates and comparison.
    """
    strategies = build_strategies(cfg, custom_strategies)
    trainer = build_trainer(cfg)
    metric = get_metric(cfg.metric)
    pipeline = FeaturePipeline(cfg.preprocessing.steps)
    positive_label = cfg.positive_label if cfg.positive_label is not None else train.minority_label

    logger.info(
        "Study: %d train / %d test records, strategies=%s, model=%s",
        train.n_samples, test.n_samples, [s.name for s in strategies], cfg.model,
    )

    summaries = run_resampling(
        train,
        cfg.scheme,
        strategies,
        trainer,
        metric,
        pipeline=pipeline,
        param_grid=cfg.param_grid,
        positive_label=positive_label,
        n_jobs=cfg.n_jobs,
        timeout=cfg.timeout,
        show_progress=show_progress,
    )

    estimates: Dict[str, TestEstimate] = {}
    final_failures: Dict[str, str] = {}
    for strategy in strategies:
        summary = summaries[strategy.name]
        try:
            model = fit_final_model(
                train,
                strategy,
                trainer,
                pipeline=pipeline,
                hyperparameters=summary.best_hyperparameters,
                seed=cfg.scheme.seed,
            )
            estimates[strategy.name] = evaluate(model, test, metric, positive_label)
        except FoldError as exc:
            logger.warning("Test evaluation failed for strategy=%s: %s", strategy.name, exc)
            final_failures[strategy.name] = f"{exc.kind}: {exc}"

    comparison = compare(summaries, estimates)
    if comparison.largest_gap is not None:
        logger.info(
            "Largest resampling/test gap: strategy=%s (%.4f)",
            comparison.largest_gap, comparison.gap(comparison.largest_gap),
        )

    return StudyResult(
        summaries=summaries,
        estimates=estimates,
        comparison=comparison,
        final_failures=final_failures,
    )
