"""
Sampling strategies: a closed set of built-ins plus a custom extension point.

A SamplingStrategy pairs a named Subsampler with the PreprocessingOrder the
fold executor must follow. The executor only ever calls
``strategy.apply``; it never branches on the strategy kind.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional

import pandas as pd

from subsample_cv.config import PreprocessingOrder, SamplingConfig
from subsample_cv.sampling.base import FunctionSampler, NoSampler, SamplerFn, Subsampler
from subsample_cv.sampling.random_samplers import DownSampler, UpSampler
from subsample_cv.sampling.synthetic import RoseSampler, SmoteSampler


class SamplingKind(str, Enum):
    """Tag identifying which sampling policy a strategy implements."""

    NONE = "none"
    DOWN = "down"
    UP = "up"
    SMOTE = "smote"
    ROSE = "rose"
    CUSTOM = "custom"


@dataclass(frozen=True)
class SamplingStrategy:
    """Named, stateless sampling policy.

    Attributes:
        name: Tag attached to every result produced with this strategy.
        kind: Which policy the sampler implements.
        sampler: The transform applied to training slices.
        order: Whether sampling happens before or after preprocessing.
    """

    name: str
    kind: SamplingKind
    sampler: Subsampler
    order: PreprocessingOrder = PreprocessingOrder.BEFORE

    def apply(
        self,
        X: pd.DataFrame,
        y: pd.Series,
        random_state: Optional[int] = None,
    ) -> tuple[pd.DataFrame, pd.Series]:
        """Rebalance a training slice."""
        return self.sampler.resample(X, y, random_state=random_state)


_BUILDERS: Dict[SamplingKind, Callable[[SamplingConfig], Subsampler]] = {
    SamplingKind.NONE: lambda cfg: NoSampler(),
    SamplingKind.DOWN: lambda cfg: DownSampler(),
    SamplingKind.UP: lambda cfg: UpSampler(),
    SamplingKind.SMOTE: lambda cfg: SmoteSampler(
        k=cfg.smote_k, perc_over=cfg.smote_perc_over, perc_under=cfg.smote_perc_under
    ),
    SamplingKind.ROSE: lambda cfg: RoseSampler(p=cfg.rose_p, shrink=cfg.rose_shrink),
}


def build_strategy(cfg: SamplingConfig) -> SamplingStrategy:
    """Construct a built-in strategy from its config."""
    kind = SamplingKind(cfg.strategy)
    return SamplingStrategy(
        name=cfg.display_name,
        kind=kind,
        sampler=_BUILDERS[kind](cfg),
        order=PreprocessingOrder(cfg.order),
    )


def custom_strategy(
    name: str,
    fn: SamplerFn,
    order: PreprocessingOrder = PreprocessingOrder.BEFORE,
) -> SamplingStrategy:
    """Wrap a user callable ``fn(X, y, random_state) -> (X', y')`` as a strategy."""
    return SamplingStrategy(
        name=name,
        kind=SamplingKind.CUSTOM,
        sampler=FunctionSampler(fn, name=name),
        order=PreprocessingOrder(order),
    )
