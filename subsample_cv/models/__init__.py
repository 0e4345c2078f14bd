"""Trainer implementations for the resampling harness."""

from subsample_cv.config import ExperimentConfig, LogisticRegressionConfig, XGBoostConfig
from subsample_cv.models.base import Predictor, Trainer, encode_features
from subsample_cv.models.logistic_regression import (
    LogisticRegressionModel,
    LogisticRegressionTrainer,
)
from subsample_cv.models.xgboost_model import XGBoostModel, XGBoostTrainer


def build_trainer(cfg: ExperimentConfig) -> Trainer:
    """Construct the trainer selected by an experiment config."""
    if cfg.model == "xgboost":
        return XGBoostTrainer(cfg.xgboost)
    return LogisticRegressionTrainer(cfg.logistic_regression)


__all__ = [
    "LogisticRegressionConfig",
    "LogisticRegressionModel",
    "LogisticRegressionTrainer",
    "Predictor",
    "Trainer",
    "XGBoostConfig",
    "XGBoostModel",
    "XGBoostTrainer",
    "build_trainer",
    "encode_features",
]
