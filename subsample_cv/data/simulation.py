"""
Simulated imbalanced two-class data.

Class-conditional Gaussian features with an exact minority share:
- informative columns (x0, x1, ...) shifted by ``separation`` for the minority
- noise columns (noise0, noise1, ...) identical for both classes
- optional categorical column whose level frequencies depend on the class
"""

from __future__ import annotations

import numpy as np
import pandas as pd

from subsample_cv.config import SimulationConfig
from subsample_cv.data.dataset import Dataset


class ImbalancedGenerator:
    """
    Generates imbalanced two-class data for sampling comparisons.

    Labels are assigned first with exactly ``round(n * minority_fraction)``
    minority records, then features are sampled from class-specific
    Gaussian distributions with a shared random covariance.
    """

    def __init__(self, cfg: SimulationConfig):
        if not 0.0 < cfg.minority_fraction < 0.5:
            raise ValueError("minority_fraction must be between 0 and 0.5 (exclusive)")
        self.cfg = cfg
        self.rng = np.random.default_rng(cfg.random_seed)

        # Pre-generate distribution parameters at init for consistency across samples
        self._mu_majority, self._mu_minority = self._generate_means()
        self._sigma = self._generate_covariance()

    def _generate_means(self) -> tuple[np.ndarray, np.ndarray]:
        """Class means for the informative columns.

        Minority means alternate in sign so no single column separates the
        classes on its own.
        """
        n_inf = self.cfg.n_informative
        signs = np.where(np.arange(n_inf) % 2 == 0, 1.0, -1.0)
        mu_majority = np.zeros(n_inf)
        mu_minority = signs * self.cfg.separation
        return mu_majority, mu_minority

    def _generate_covariance(self) -> np.ndarray:
        """Symmetric positive-definite covariance via A @ A.T / d + I."""
        n_inf = self.cfg.n_informative
        A = self.rng.uniform(-0.5, 0.5, size=(n_inf, n_inf))
        return A @ A.T / n_inf + np.eye(n_inf)

    def _sample_labels(self, n_samples: int) -> np.ndarray:
        n_minority = int(round(n_samples * self.cfg.minority_fraction))
        n_minority = max(1, min(n_samples - 1, n_minority))
        labels = np.array(
            [self.cfg.minority_label] * n_minority
            + [self.cfg.majority_label] * (n_samples - n_minority),
            dtype=object,
        )
        self.rng.shuffle(labels)
        return labels

    def _sample_categorical(self, is_minority: np.ndarray) -> np.ndarray:
        levels = np.array([f"level{i}" for i in range(self.cfg.n_categories)], dtype=object)
        base = np.ones(self.cfg.n_categories)
        p_majority = base / base.sum()
        skewed = base.copy()
        skewed[-1] += 2.0
        p_minority = skewed / skewed.sum()

        out = np.empty(len(is_minority), dtype=object)
        n_min = int(is_minority.sum())
        out[is_minority] = self.rng.choice(levels, size=n_min, p=p_minority)
        out[~is_minority] = self.rng.choice(levels, size=len(is_minority) - n_min, p=p_majority)
        return out

    def generate(self, n_samples: int | None = None) -> Dataset:
        """Generate a dataset.

        Args:
            n_samples: Number of records. Defaults to ``cfg.n_samples``.

        Returns:
            Dataset with features (x0.., noise0.., [cat]) and string labels.
        """
        n = n_samples if n_samples is not None else self.cfg.n_samples
        labels = self._sample_labels(n)
        is_minority = labels == self.cfg.minority_label

        informative = np.zeros((n, self.cfg.n_informative))
        informative[~is_minority] = self.rng.multivariate_normal(
            self._mu_majority, self._sigma, size=int((~is_minority).sum())
        )
        informative[is_minority] = self.rng.multivariate_normal(
            self._mu_minority, self._sigma, size=int(is_minority.sum())
        )

        df = pd.DataFrame(informative, columns=[f"x{i}" for i in range(self.cfg.n_informative)])
        for i in range(self.cfg.n_noise):
            df[f"noise{i}"] = self.rng.normal(size=n)
        if self.cfg.include_categorical:
            df["cat"] = pd.Categorical(self._sample_categorical(is_minority))

        return Dataset(X=df, y=pd.Series(labels, name="Class"))

    def generate_train_test(self, n_test: int | None = None) -> tuple[Dataset, Dataset]:
        """Generate an independent training set and test set.

        Both are drawn from the same population, so the test set keeps the
        original imbalance.
        """
        train = self.generate()
        test = self.generate(n_test if n_test is not None else self.cfg.n_samples)
        return train, test
