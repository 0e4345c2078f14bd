"""
External test-set evaluation.

The final model for a strategy is fit once on the whole training set, with
the strategy's sampling applied exactly once and in the same order relative
to preprocessing as inside the resampling loop. It is then scored on an
untouched test set that keeps the original class imbalance.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import pandas as pd

from subsample_cv.data.dataset import Dataset
from subsample_cv.evaluation.executor import (
    derive_seed,
    predict_scores,
    prepare_training_data,
    train_predictor,
)
from subsample_cv.evaluation.metrics import Metric
from subsample_cv.models.base import Predictor, Trainer
from subsample_cv.preprocessing.feature_pipeline import FeaturePipeline, FittedPipeline
from subsample_cv.sampling.strategy import SamplingStrategy

logger = logging.getLogger("subsample_cv.evaluation.test_evaluator")


@dataclass(frozen=True)
class TestEstimate:
    """Test-set metric for one strategy with its interval."""

    __test__ = False  # not a pytest test class

    strategy: str
    metric: str
    estimate: float
    lower: Optional[float] = None
    upper: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "strategy": self.strategy,
            "metric": self.metric,
            "estimate": self.estimate,
            "lower": self.lower,
            "upper": self.upper,
        }


@dataclass(frozen=True)
class FittedModel:
    """Predictor plus the preprocessing fitted alongside it."""

    strategy: str
    predictor: Predictor
    pipeline: FittedPipeline
    hyperparameters: Dict[str, Any] = field(default_factory=dict)
    n_train_sampled: int = 0

    def predict_proba(self, X: pd.DataFrame) -> pd.DataFrame:
        """Class probabilities for raw (unprocessed) features."""
        return self.predictor.predict_proba(self.pipeline.transform(X))

    def positive_scores(self, X: pd.DataFrame, positive_label: Any):
        return self.predictor.positive_scores(self.pipeline.transform(X), positive_label)


def fit_final_model(
    dataset: Dataset,
    strategy: SamplingStrategy,
    trainer: Trainer,
    pipeline: Optional[FeaturePipeline] = None,
    hyperparameters: Optional[Dict[str, Any]] = None,
    seed: int = 0,
) -> FittedModel:
    """Fit one model on the full training set for a strategy.

    Args:
        dataset: Complete training set (unsplit).
        strategy: Sampling strategy, applied once.
        trainer: External trainer.
        pipeline: Preprocessing steps; pass-through if None.
        hyperparameters: Usually the best candidate from resampling.
        seed: Run seed; the sampling seed is derived from it and the
            strategy name.

    Raises:
        DegenerateClassError: If the training set cannot support the strategy.
        SamplingFailure: If the subsampler raises for any other reason.
        PreprocessingFailure: If the pipeline cannot be fit.
        TrainerFailure: If the trainer fails.
    """
    pipeline = pipeline or FeaturePipeline()
    hyperparameters = dict(hyperparameters or {})
    random_state = derive_seed(seed, "final", strategy.name)

    X_fit, y_fit, fitted = prepare_training_data(
        dataset.X, dataset.y, strategy, pipeline, random_state
    )
    predictor = train_predictor(trainer, X_fit, y_fit, hyperparameters)
    logger.info(
        "Final model for strategy=%s trained on %d rows (from %d)",
        strategy.name, len(y_fit), dataset.n_samples,
    )
    return FittedModel(
        strategy=strategy.name,
        predictor=predictor,
        pipeline=fitted,
        hyperparameters=hyperparameters,
        n_train_sampled=len(y_fit),
    )


def evaluate(
    model: FittedModel,
    test_set: Dataset,
    metric: Metric,
    positive_label: Any = None,
) -> TestEstimate:
    """Score a fitted model on the external test set.

    The test set is used as-is; it is never subsampled.

    Args:
        model: Model from fit_final_model().
        test_set: Independent test set.
        metric: Metric capability (e.g. ROC AUC with DeLong interval).
        positive_label: Class scored as positive; test-set minority if None.

    Returns:
        TestEstimate for the model's strategy.

    Raises:
        MetricComputationError: If the metric is undefined on the test set.
    """
    if positive_label is None:
        positive_label = test_set.minority_label

    scores = predict_scores(model, test_set.X, positive_label)
    value = metric(test_set.y.to_numpy(), scores, positive_label)
    return TestEstimate(
        strategy=model.strategy,
        metric=metric.name,
        estimate=value.value,
        lower=value.lower,
        upper=value.upper,
    )
