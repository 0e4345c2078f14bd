"""
Experiment runners for sampling comparisons.

This module provides:
- imbalance_runner: resampled vs. external test estimates per sampling strategy
"""

from subsample_cv.experiments.imbalance_runner import (
    StudyResult,
    build_strategies,
    run_imbalance_study,
)

__all__ = ["StudyResult", "build_strategies", "run_imbalance_study"]
