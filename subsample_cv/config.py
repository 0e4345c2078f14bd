"""
Configuration management using pydantic.

All config classes use pydantic for validation and YAML loading.
Config files are stored in configs/ directory.

Every config is frozen: a run is described by a value built fresh for that
run and passed explicitly to the orchestrator, never by a shared object
mutated between runs.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, ClassVar, Dict, List, Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field


# Base path for config files
CONFIGS_DIR = Path(__file__).parent.parent / "configs"


def load_yaml(path: Path | str) -> dict[str, Any]:
    """Load a YAML file and return as dict."""
    with open(path) as f:
        return yaml.safe_load(f) or {}


class FrozenConfig(BaseModel):
    """Base class for immutable configs loadable from YAML."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    DEFAULT_FILE: ClassVar[str] = ""

    @classmethod
    def from_yaml(cls, path: Path | str | None = None):
        """Load config from YAML file.

        Args:
            path: Path to YAML file. If None, uses the class default under
                configs/.
        """
        if path is None:
            path = CONFIGS_DIR / cls.DEFAULT_FILE
        return cls(**load_yaml(path))


class PreprocessingOrder(str, Enum):
    """Position of the subsampling step relative to preprocessing."""

    BEFORE = "before"  # subsample the raw train slice, then fit preprocessing
    AFTER = "after"  # fit preprocessing on the raw train slice, then subsample


class ResamplingSchemeConfig(FrozenConfig):
    """Configuration for the resampling scheme (fold plan).

    Range checks that depend on the dataset (k versus number of records)
    happen in the fold planner and raise InvalidSchemeError.
    """

    kind: Literal["kfold", "bootstrap"] = "kfold"
    k: int = 10
    repeats: int = 5
    n_bootstraps: int = 25
    seed: int = 42
    stratified: bool = True

    DEFAULT_FILE: ClassVar[str] = "resampling.yaml"

    @property
    def n_partitions(self) -> int:
        """Number of partitions the scheme produces."""
        if self.kind == "bootstrap":
            return self.n_bootstraps
        return self.k * self.repeats


class SamplingConfig(FrozenConfig):
    """Configuration for one sampling strategy.

    SMOTE defaults follow the classic perc.over / perc.under formulation:
    200 means two synthetic records per minority record, and a majority
    class sized at twice the number of synthetic records.
    """

    strategy: Literal["none", "down", "up", "smote", "rose"] = "none"
    name: Optional[str] = None
    order: PreprocessingOrder = PreprocessingOrder.BEFORE
    smote_k: int = 5
    smote_perc_over: int = 200
    smote_perc_under: int = 200
    rose_p: float = 0.5
    rose_shrink: float = 1.0

    DEFAULT_FILE: ClassVar[str] = "sampling.yaml"

    @property
    def display_name(self) -> str:
        """Name used to tag results for this strategy."""
        if self.name:
            return self.name
        return "original" if self.strategy == "none" else self.strategy


class PreprocessingConfig(FrozenConfig):
    """Ordered preprocessing steps applied inside each fold."""

    steps: List[Literal["impute", "center", "scale", "onehot"]] = Field(default_factory=list)

    DEFAULT_FILE: ClassVar[str] = "preprocessing.yaml"


class XGBoostConfig(FrozenConfig):
    """Configuration for XGBoost model.

    Early stopping is disabled by default; sampled training slices can be
    too small to split off a validation set.
    """

    n_estimators: int = 100
    max_depth: int = 3
    learning_rate: float = 0.1
    subsample: float = 0.8
    colsample_bytree: float = 0.8
    early_stopping_rounds: Optional[int] = None
    validation_fraction: float = 0.2  # Fraction of training data for early stopping
    n_jobs: int = 1
    random_seed: int = 42

    DEFAULT_FILE: ClassVar[str] = "model_xgboost.yaml"


class LogisticRegressionConfig(FrozenConfig):
    """Configuration for (regularized) logistic regression."""

    penalty: Optional[str] = None  # scikit-learn default (L2) when unset
    C: float = 1.0  # Inverse regularization strength
    solver: str = "lbfgs"
    max_iter: int = 1000
    random_seed: int = 42

    DEFAULT_FILE: ClassVar[str] = "model_logistic_regression.yaml"


class SimulationConfig(FrozenConfig):
    """Configuration for simulated imbalanced two-class data."""

    random_seed: int = 42
    n_samples: int = 1000
    minority_fraction: float = 0.05
    n_informative: int = 5
    n_noise: int = 5
    separation: float = 1.0
    include_categorical: bool = True
    n_categories: int = 3
    majority_label: str = "Class1"
    minority_label: str = "Class2"

    DEFAULT_FILE: ClassVar[str] = "simulation.yaml"


def _default_sampling() -> List[SamplingConfig]:
    return [
        SamplingConfig(strategy="none"),
        SamplingConfig(strategy="down"),
        SamplingConfig(strategy="up"),
        SamplingConfig(strategy="smote"),
        SamplingConfig(strategy="rose"),
    ]


class ExperimentConfig(FrozenConfig):
    """Configuration for a full sampling comparison study.

    Attributes:
        scheme: Resampling scheme shared by every strategy.
        sampling: Strategies to compare; names must be unique.
        preprocessing: Steps fit inside each fold.
        model: Trainer family.
        param_grid: Hyperparameter grid tuned inside the resampling loop
            (expanded with sklearn.model_selection.ParameterGrid).
        metric: Metric name, see subsample_cv.evaluation.metrics.
        n_jobs: Worker count for (fold, strategy) units; -2 = all cores but one.
        timeout: Optional per-unit timeout in seconds passed to joblib.
        positive_label: Class scored as positive; defaults to the minority class.
        test_fraction: Share held out as the external test set when a single
            dataset is split by the runner.
    """

    scheme: ResamplingSchemeConfig = Field(default_factory=ResamplingSchemeConfig)
    sampling: List[SamplingConfig] = Field(default_factory=_default_sampling)
    preprocessing: PreprocessingConfig = Field(default_factory=PreprocessingConfig)
    model: Literal["xgboost", "logistic_regression"] = "xgboost"
    xgboost: XGBoostConfig = Field(default_factory=XGBoostConfig)
    logistic_regression: LogisticRegressionConfig = Field(
        default_factory=LogisticRegressionConfig
    )
    param_grid: Dict[str, List[Any]] = Field(default_factory=dict)
    metric: str = "roc_auc"
    n_jobs: int = 1
    timeout: Optional[float] = None
    positive_label: Optional[Any] = None
    test_fraction: float = 0.25

    DEFAULT_FILE: ClassVar[str] = "experiment.yaml"
