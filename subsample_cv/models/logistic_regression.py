"""
Logistic regression trainer.

A fast, linear alternative to XGBoost; also used by the test suite.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import pandas as pd
from sklearn.linear_model import LogisticRegression

from subsample_cv.config import LogisticRegressionConfig
from subsample_cv.models.base import (
    LabelEncodedPredictor,
    encode_features,
    encode_labels,
)


class LogisticRegressionModel(LabelEncodedPredictor):
    """Fitted logistic regression returned by LogisticRegressionTrainer."""


class LogisticRegressionTrainer:
    """Regularized logistic regression trainer."""

    def __init__(self, cfg: LogisticRegressionConfig | None = None):
        """Initialize trainer with config.

        Args:
            cfg: Configuration. Uses defaults if None.
        """
        self.cfg = cfg or LogisticRegressionConfig()

    def train(
        self,
        X: pd.DataFrame,
        y: pd.Series,
        hyperparameters: Optional[Dict[str, Any]] = None,
    ) -> LogisticRegressionModel:
        """Fit model on training data.

        Args:
            X: Feature frame.
            y: Class labels.
            hyperparameters: LogisticRegressionConfig field overrides.

        Returns:
            Fitted LogisticRegressionModel.
        """
        cfg = type(self.cfg)(**{**self.cfg.model_dump(), **(hyperparameters or {})})
        features = encode_features(X)
        codes, classes = encode_labels(y)

        params = dict(C=cfg.C, solver=cfg.solver, max_iter=cfg.max_iter, random_state=cfg.random_seed)
        if cfg.penalty is not None:
            params["penalty"] = cfg.penalty
        model = LogisticRegression(**params)
        model.fit(features.to_numpy(), codes)
        return LogisticRegressionModel(model, classes, list(features.columns))
