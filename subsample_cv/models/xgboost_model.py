"""
XGBoost trainer for class-imbalance experiments.

Provides a simple interface for XGBoost classification with default
hyperparameters from XGBoostConfig; per-call hyperparameters (from a tuning
grid) override the config for that fit only.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import numpy as np
import pandas as pd
import xgboost as xgb
from sklearn.model_selection import train_test_split

from subsample_cv.config import XGBoostConfig
from subsample_cv.models.base import (
    LabelEncodedPredictor,
    encode_features,
    encode_labels,
)


class XGBoostModel(LabelEncodedPredictor):
    """Fitted XGBoost classifier returned by XGBoostTrainer."""


class XGBoostTrainer:
    """XGBoost classifier trainer.

    Wraps xgboost.XGBClassifier. Categorical columns are one-hot encoded
    before fitting, labels are encoded to 0..n-1 and mapped back on the
    probability table.

    Uses early stopping with a validation split only when
    ``early_stopping_rounds`` is set and enough data is available.
    """

    def __init__(self, cfg: XGBoostConfig | None = None) -> None:
        self.cfg = cfg or XGBoostConfig()

    def train(
        self,
        X: pd.DataFrame,
        y: pd.Series,
        hyperparameters: Optional[Dict[str, Any]] = None,
    ) -> XGBoostModel:
        """Train the model on a (possibly sampled) training slice.

        Args:
            X: Feature frame.
            y: Class labels.
            hyperparameters: XGBoostConfig field overrides for this fit.

        Returns:
            Fitted XGBoostModel.
        """
        cfg = type(self.cfg)(**{**self.cfg.model_dump(), **(hyperparameters or {})})
        features = encode_features(X)
        codes, classes = encode_labels(y)
        binary = len(classes) <= 2

        model = xgb.XGBClassifier(
            n_estimators=cfg.n_estimators,
            max_depth=cfg.max_depth,
            learning_rate=cfg.learning_rate,
            subsample=cfg.subsample,
            colsample_bytree=cfg.colsample_bytree,
            random_state=cfg.random_seed,
            n_jobs=cfg.n_jobs,
            objective="binary:logistic" if binary else "multi:softprob",
            eval_metric="auc" if binary else "mlogloss",
            early_stopping_rounds=cfg.early_stopping_rounds,
        )

        X_arr = features.to_numpy()
        # Split data for early stopping validation
        if cfg.early_stopping_rounds and len(X_arr) > 50 and cfg.validation_fraction > 0:
            X_train, X_val, y_train, y_val = train_test_split(
                X_arr, codes,
                test_size=cfg.validation_fraction,
                random_state=cfg.random_seed,
                stratify=codes if len(np.unique(codes)) > 1 else None,
            )
            model.fit(X_train, y_train, eval_set=[(X_val, y_val)], verbose=False)
        else:
            model.set_params(early_stopping_rounds=None)
            model.fit(X_arr, codes)

        return XGBoostModel(model, classes, list(features.columns))
