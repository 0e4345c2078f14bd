"""Preprocessing module for feature pipelines."""

from subsample_cv.preprocessing.feature_pipeline import (
    SUPPORTED_STEPS,
    FeaturePipeline,
    FittedPipeline,
)

__all__ = ["FeaturePipeline", "FittedPipeline", "SUPPORTED_STEPS"]
