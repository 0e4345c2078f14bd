"""Exception hierarchy for subsample-cv.

All exceptions inherit from SubsampleCVError so callers can catch broadly
or narrowly as needed.

Configuration errors (InvalidSchemeError) abort a run before any fold is
executed. Per-fold errors (DegenerateClassError, SamplingFailure,
PreprocessingFailure, TrainerFailure, MetricComputationError) are caught at
the fold executor boundary and recorded on the fold result instead of
aborting the run.
"""

from __future__ import annotations


class SubsampleCVError(Exception):
    """Base exception for all subsample-cv errors."""


class InvalidSchemeError(SubsampleCVError, ValueError):
    """Resampling scheme parameters are invalid for the dataset."""


class NotFittedError(SubsampleCVError, RuntimeError):
    """A predictor or preprocessing pipeline was used before fitting."""


# ---------------------------------------------------------------------------
# Per-fold errors
# ---------------------------------------------------------------------------

class FoldError(SubsampleCVError):
    """Failure confined to a single fold.

    The ``kind`` attribute is the short tag stored on fold results.
    """

    kind = "fold_error"


class DegenerateClassError(FoldError, ValueError):
    """Training slice cannot support the chosen sampling strategy."""

    kind = "degenerate_class"


class TrainerFailure(FoldError):
    """Opaque failure raised by the external trainer."""

    kind = "trainer_failure"


class MetricComputationError(FoldError, ValueError):
    """Metric is undefined for the given labels and scores."""

    kind = "metric_error"


class SamplingFailure(FoldError):
    """Subsampler raised on a training slice for a reason other than class support."""

    kind = "sampling_failure"


class PreprocessingFailure(FoldError):
    """Preprocessing pipeline failed to fit or transform a fold's data."""

    kind = "preprocessing_failure"
