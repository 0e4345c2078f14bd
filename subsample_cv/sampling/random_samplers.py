"""Random down-sampling and up-sampling of training slices."""

from __future__ import annotations

import logging

import numpy as np

from subsample_cv.sampling.base import (
    Subsampler,
    check_sampling_input,
    class_positions,
    take_rows,
)

logger = logging.getLogger("subsample_cv.sampling.random_samplers")


class DownSampler(Subsampler):
    """Sample every class down to the size of the smallest class.

    Each class contributes ``m = min(class counts)`` records drawn without
    replacement, so the result has ``m * n_classes`` rows.
    """

    name = "down"

    def resample(self, X, y, random_state=None):
        counts = check_sampling_input(X, y)
        rng = np.random.default_rng(random_state)
        m = min(counts.values())

        chosen = [
            rng.choice(positions, size=m, replace=False)
            for positions in class_positions(y).values()
        ]
        combined = np.concatenate(chosen)
        rng.shuffle(combined)

        logger.debug("Down-sampled %d rows to %d (%d per class)", len(y), len(combined), m)
        return take_rows(X, y, combined)


class UpSampler(Subsampler):
    """Sample every class up to the size of the largest class.

    Classes already at ``M = max(class counts)`` are returned unchanged.
    Smaller classes keep every record and add ``M - n`` draws with
    replacement, so the result has ``M * n_classes`` rows.
    """

    name = "up"

    def resample(self, X, y, random_state=None):
        counts = check_sampling_input(X, y)
        rng = np.random.default_rng(random_state)
        M = max(counts.values())

        chosen = []
        for positions in class_positions(y).values():
            if len(positions) < M:
                extra = rng.choice(positions, size=M - len(positions), replace=True)
                positions = np.concatenate([positions, extra])
            chosen.append(positions)
        combined = np.concatenate(chosen)
        rng.shuffle(combined)

        logger.debug("Up-sampled %d rows to %d (%d per class)", len(y), len(combined), M)
        return take_rows(X, y, combined)
