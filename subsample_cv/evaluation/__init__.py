"""Evaluation: metrics, fold execution, resampling orchestration and comparison."""

from subsample_cv.evaluation.comparison import (
    ComparisonReport,
    ComparisonRow,
    compare,
    estimates_to_frame,
    folds_to_frame,
    summaries_to_frame,
)
from subsample_cv.evaluation.executor import (
    FoldResult,
    FoldStatus,
    derive_seed,
    execute_fold,
    prepare_training_data,
)
from subsample_cv.evaluation.metrics import (
    METRICS,
    Metric,
    MetricValue,
    compute_auc,
    compute_metrics,
    get_metric,
)
from subsample_cv.evaluation.orchestrator import (
    ResamplingSummary,
    expand_param_grid,
    run_resampling,
)
from subsample_cv.evaluation.test_evaluator import (
    FittedModel,
    TestEstimate,
    evaluate,
    fit_final_model,
)

__all__ = [
    "METRICS",
    "ComparisonReport",
    "ComparisonRow",
    "FittedModel",
    "FoldResult",
    "FoldStatus",
    "Metric",
    "MetricValue",
    "ResamplingSummary",
    "TestEstimate",
    "compare",
    "compute_auc",
    "compute_metrics",
    "derive_seed",
    "estimates_to_frame",
    "evaluate",
    "execute_fold",
    "expand_param_grid",
    "fit_final_model",
    "folds_to_frame",
    "get_metric",
    "prepare_training_data",
    "run_resampling",
    "summaries_to_frame",
]
