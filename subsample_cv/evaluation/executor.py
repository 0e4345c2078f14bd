"""
Fold executor: one partition, one sampling strategy.

Ordering per strategy.order:
- BEFORE: subsample train slice -> fit preprocessing on sampled slice ->
  transform holdout -> train -> score holdout
- AFTER: fit preprocessing on raw train slice -> transform holdout ->
  subsample processed train slice -> train -> score holdout

The holdout slice is never passed to the subsampler and the preprocessing
pipeline is never fit on it. Sampling is done once per (fold, strategy);
every hyperparameter candidate is trained on the same sampled slice.
"""

from __future__ import annotations

import logging
import zlib
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from subsample_cv.config import PreprocessingOrder
from subsample_cv.data.dataset import Dataset
from subsample_cv.data.splitters import Partition
from subsample_cv.evaluation.metrics import Metric
from subsample_cv.exceptions import (
    FoldError,
    MetricComputationError,
    PreprocessingFailure,
    SamplingFailure,
    TrainerFailure,
)
from subsample_cv.models.base import Trainer
from subsample_cv.preprocessing.feature_pipeline import FeaturePipeline, FittedPipeline
from subsample_cv.sampling.strategy import SamplingStrategy

logger = logging.getLogger("subsample_cv.evaluation.executor")


class FoldStatus(str, Enum):
    OK = "ok"
    FAILED = "failed"  # sampling or training failed; no metric
    EXCLUDED = "excluded"  # metric undefined for this holdout


@dataclass(frozen=True)
class FoldResult:
    """Metric for one (fold, strategy, hyperparameter candidate).

    Attributes:
        strategy: Sampling strategy name.
        repeat_id: Repeat of the fold plan.
        fold_id: Fold within the repeat.
        candidate_id: Index into the hyperparameter candidate list.
        hyperparameters: Candidate hyperparameters.
        status: ok, failed or excluded.
        value: Metric value (None unless status is ok).
        lower: Lower interval bound, when the metric provides one.
        upper: Upper interval bound, when the metric provides one.
        error_kind: Tag of the per-fold error, if any.
        message: Error message, if any.
        n_train: Rows in the training slice before sampling.
        n_train_sampled: Rows the predictor was trained on.
        sampled_class_counts: Class counts after sampling.
        holdout_class_counts: Class counts of the untouched holdout.
        holdout_idx: Dataset positions of the holdout records.
    """

    strategy: str
    repeat_id: int
    fold_id: int
    candidate_id: int
    hyperparameters: Dict[str, Any]
    status: FoldStatus
    value: Optional[float] = None
    lower: Optional[float] = None
    upper: Optional[float] = None
    error_kind: Optional[str] = None
    message: Optional[str] = None
    n_train: int = 0
    n_train_sampled: Optional[int] = None
    sampled_class_counts: Dict[Any, int] = field(default_factory=dict)
    holdout_class_counts: Dict[Any, int] = field(default_factory=dict)
    holdout_idx: np.ndarray = field(default_factory=lambda: np.array([], dtype=int))

    @property
    def ok(self) -> bool:
        return self.status is FoldStatus.OK

    def to_row(self) -> Dict[str, Any]:
        """Flat dict for tabular output."""
        return {
            "strategy": self.strategy,
            "repeat_id": self.repeat_id,
            "fold_id": self.fold_id,
            "candidate_id": self.candidate_id,
            "hyperparameters": self.hyperparameters,
            "status": self.status.value,
            "value": self.value,
            "lower": self.lower,
            "upper": self.upper,
            "error_kind": self.error_kind,
            "message": self.message,
            "n_train": self.n_train,
            "n_train_sampled": self.n_train_sampled,
            "n_holdout": len(self.holdout_idx),
        }


def derive_seed(base_seed: int, *parts: Union[int, str]) -> int:
    """Deterministic 32-bit seed from a base seed and identifying parts.

    String parts (strategy names) are hashed with CRC32 so the seed does not
    depend on Python's per-process hash randomization.
    """
    entropy = [base_seed]
    for part in parts:
        entropy.append(zlib.crc32(part.encode("utf-8")) if isinstance(part, str) else part)
    return int(np.random.SeedSequence(entropy).generate_state(1)[0])


def _class_counts(y: pd.Series) -> Dict[Any, int]:
    return {label: int(n) for label, n in y.value_counts().items()}


def sample_slice(
    strategy: SamplingStrategy,
    X: pd.DataFrame,
    y: pd.Series,
    random_state: Optional[int],
) -> Tuple[pd.DataFrame, pd.Series]:
    """Apply the strategy, wrapping unexpected sampler errors in SamplingFailure."""
    try:
        return strategy.apply(X, y, random_state=random_state)
    except FoldError:
        raise
    except Exception as exc:
        raise SamplingFailure(f"{type(exc).__name__}: {exc}") from exc


def fit_pipeline(pipeline: FeaturePipeline, X: pd.DataFrame) -> Tuple[FittedPipeline, pd.DataFrame]:
    """Fit preprocessing on a training slice, wrapping failures in PreprocessingFailure."""
    try:
        return pipeline.fit_transform(X)
    except Exception as exc:
        raise PreprocessingFailure(f"{type(exc).__name__}: {exc}") from exc


def transform_slice(fitted: FittedPipeline, X: pd.DataFrame) -> pd.DataFrame:
    """Apply a fitted pipeline to evaluation data, wrapping failures in PreprocessingFailure."""
    try:
        return fitted.transform(X)
    except Exception as exc:
        raise PreprocessingFailure(f"{type(exc).__name__}: {exc}") from exc


def prepare_training_data(
    X_train: pd.DataFrame,
    y_train: pd.Series,
    strategy: SamplingStrategy,
    pipeline: FeaturePipeline,
    random_state: Optional[int],
) -> Tuple[pd.DataFrame, pd.Series, FittedPipeline]:
    """Apply sampling and preprocessing to a training slice in strategy order.

    Returns:
        (X_fit, y_fit, fitted_pipeline): the predictor's training data and
        the pipeline to apply to any evaluation data.

    Raises:
        DegenerateClassError: If the slice cannot support the strategy.
        SamplingFailure: If the subsampler raises for any other reason.
        PreprocessingFailure: If the pipeline cannot be fit.
    """
    if strategy.order is PreprocessingOrder.BEFORE:
        X_sampled, y_sampled = sample_slice(strategy, X_train, y_train, random_state)
        fitted, X_fit = fit_pipeline(pipeline, X_sampled)
        return X_fit, y_sampled, fitted

    fitted, X_processed = fit_pipeline(pipeline, X_train)
    X_fit, y_fit = sample_slice(strategy, X_processed, y_train, random_state)
    return X_fit, y_fit, fitted


def train_predictor(trainer: Trainer, X: pd.DataFrame, y: pd.Series, hyperparameters: Dict[str, Any]):
    """Call the external trainer, wrapping any failure in TrainerFailure."""
    try:
        return trainer.train(X, y, hyperparameters)
    except Exception as exc:
        raise TrainerFailure(f"{type(exc).__name__}: {exc}") from exc


def predict_scores(predictor, X: pd.DataFrame, positive_label: Any) -> np.ndarray:
    """Score records with a fitted predictor, wrapping failures in TrainerFailure."""
    try:
        return predictor.positive_scores(X, positive_label)
    except Exception as exc:
        raise TrainerFailure(f"{type(exc).__name__}: {exc}") from exc


def execute_fold(
    dataset: Dataset,
    partition: Partition,
    strategy: SamplingStrategy,
    trainer: Trainer,
    metric: Metric,
    pipeline: Optional[FeaturePipeline] = None,
    candidates: Sequence[Dict[str, Any]] = ({},),
    positive_label: Any = None,
    base_seed: int = 0,
) -> List[FoldResult]:
    """Run one partition with one strategy for every hyperparameter candidate.

    Per-fold errors are caught here and recorded on the returned results:
    MetricComputationError as excluded, every other FoldError as failed.

    Args:
        dataset: Full training dataset (read-only).
        partition: Train/holdout indices.
        strategy: Sampling strategy applied to the train slice only.
        trainer: External trainer.
        metric: Metric computed on the holdout slice.
        pipeline: Preprocessing steps; pass-through if None.
        candidates: Hyperparameter dicts to train and score.
        positive_label: Class scored as positive; minority class if None.
        base_seed: Run seed; the sampling seed is derived from it, the
            repeat, the fold and the strategy name.

    Returns:
        One FoldResult per candidate.
    """
    pipeline = pipeline or FeaturePipeline()
    if positive_label is None:
        positive_label = dataset.minority_label

    X_train, y_train = dataset.subset(partition.train_idx)
    X_hold, y_hold = dataset.subset(partition.holdout_idx)
    seed = derive_seed(base_seed, partition.repeat_id, partition.fold_id, strategy.name)

    common = dict(
        strategy=strategy.name,
        repeat_id=partition.repeat_id,
        fold_id=partition.fold_id,
        n_train=len(y_train),
        holdout_class_counts=_class_counts(y_hold),
        holdout_idx=partition.holdout_idx,
    )

    def failed(candidate_id: int, params: Dict[str, Any], exc: Exception, status: FoldStatus, **extra):
        logger.warning(
            "Fold %s strategy=%s candidate=%d %s: %s",
            partition.key, strategy.name, candidate_id, status.value, exc,
        )
        return FoldResult(
            candidate_id=candidate_id,
            hyperparameters=dict(params),
            status=status,
            error_kind=getattr(exc, "kind", type(exc).__name__),
            message=str(exc),
            **common,
            **extra,
        )

    try:
        X_fit, y_fit, fitted = prepare_training_data(X_train, y_train, strategy, pipeline, seed)
        X_eval = transform_slice(fitted, X_hold)
    except FoldError as exc:
        return [failed(i, params, exc, FoldStatus.FAILED) for i, params in enumerate(candidates)]

    sampled = dict(n_train_sampled=len(y_fit), sampled_class_counts=_class_counts(y_fit))

    results = []
    for candidate_id, params in enumerate(candidates):
        try:
            predictor = train_predictor(trainer, X_fit, y_fit, params)
            scores = predict_scores(predictor, X_eval, positive_label)
        except TrainerFailure as exc:
            results.append(failed(candidate_id, params, exc, FoldStatus.FAILED, **sampled))
            continue

        try:
            value = metric(y_hold.to_numpy(), scores, positive_label)
        except MetricComputationError as exc:
            results.append(failed(candidate_id, params, exc, FoldStatus.EXCLUDED, **sampled))
            continue

        results.append(FoldResult(
            candidate_id=candidate_id,
            hyperparameters=dict(params),
            status=FoldStatus.OK,
            value=value.value,
            lower=value.lower,
            upper=value.upper,
            **common,
            **sampled,
        ))

    return results
