"""Subsamplers and sampling strategies applied to training slices."""

from subsample_cv.config import PreprocessingOrder, SamplingConfig
from subsample_cv.sampling.base import (
    FunctionSampler,
    NoSampler,
    Subsampler,
    check_sampling_input,
)
from subsample_cv.sampling.random_samplers import DownSampler, UpSampler
from subsample_cv.sampling.strategy import (
    SamplingKind,
    SamplingStrategy,
    build_strategy,
    custom_strategy,
)
from subsample_cv.sampling.synthetic import RoseSampler, SmoteSampler

__all__ = [
    "DownSampler",
    "FunctionSampler",
    "NoSampler",
    "PreprocessingOrder",
    "RoseSampler",
    "SamplingConfig",
    "SamplingKind",
    "SamplingStrategy",
    "SmoteSampler",
    "Subsampler",
    "UpSampler",
    "build_strategy",
    "check_sampling_input",
    "custom_strategy",
]
