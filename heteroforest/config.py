"""
Ensemble configuration - counts, subset sizes and weighting formula.

EnsembleConfig holds everything needed to train one heterogeneous ensemble.
Fields that depend on the data (predictor-subset sizes) may be left as None
and are filled in by resolve() once the number of predictors is known.

YAML round-trip:
    config = load_config("ensemble.yaml")
    save_config(config, "runs/ensemble.yaml")
"""
from __future__ import annotations

import dataclasses
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigError, ConfigValidationError
from .weights import WeightingFormula

logger = logging.getLogger(__name__)

DEFAULT_NEIGHBOR_COUNT = 5


@dataclass(frozen=True)
class EnsembleConfig:
    """
    Configuration for heterogeneous ensemble training.

    Attributes:
        nclas: Total number of classifiers
        ntree: Number of decision trees (default floor(nclas / 2))
        nknn: Number of k-nearest-neighbor classifiers
        mtr: Predictors sampled at each tree split (default floor(sqrt(p)))
        mlda: Predictors per discriminant classifier (default 2 * floor(sqrt(p)))
        mknn: Predictors per distance classifier (default 2 * floor(sqrt(p)))
        kknn: Neighbors used by distance classifiers
        weighting: Error-to-weight formula
        random_state: Seed for the ensemble's random stream (None = fresh entropy)
        n_jobs: Worker threads for training and prediction
    """
    nclas: int
    ntree: int | None = None
    nknn: int = 0
    mtr: int | None = None
    mlda: int | None = None
    mknn: int | None = None
    kknn: int = DEFAULT_NEIGHBOR_COUNT
    weighting: WeightingFormula = WeightingFormula.BOOST
    random_state: int | None = None
    n_jobs: int = 1

    def __post_init__(self) -> None:
        """Validate counts and normalise the weighting formula."""
        object.__setattr__(self, "weighting", WeightingFormula.parse(self.weighting))
        if self.ntree is None and isinstance(self.nclas, int):
            object.__setattr__(self, "ntree", self.nclas // 2)

        errors = []
        for name in ("nclas", "ntree", "nknn", "kknn", "n_jobs"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                errors.append(f"{name} must be an integer, got {value!r}")
        if errors:
            raise ConfigValidationError(errors)

        if self.nclas < 1:
            errors.append(f"nclas must be >= 1, got {self.nclas}")
        if self.ntree < 0:
            errors.append(f"ntree must be >= 0, got {self.ntree}")
        if self.nknn < 0:
            errors.append(f"nknn must be >= 0, got {self.nknn}")
        if self.nclas - self.ntree - self.nknn < 0:
            errors.append(
                f"ntree + nknn ({self.ntree} + {self.nknn}) exceeds nclas ({self.nclas})"
            )
        if self.kknn < 1:
            errors.append(f"kknn must be >= 1, got {self.kknn}")
        if self.n_jobs < 1:
            errors.append(f"n_jobs must be >= 1, got {self.n_jobs}")
        for name in ("mtr", "mlda", "mknn"):
            value = getattr(self, name)
            if value is None:
                continue
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                errors.append(f"{name} must be a positive integer, got {value!r}")

        if errors:
            raise ConfigValidationError(errors)

    @property
    def nlda(self) -> int:
        """Number of linear discriminant classifiers."""
        return self.nclas - self.ntree - self.nknn

    def resolve(self, n_predictors: int) -> "EnsembleConfig":
        """
        Fill data-dependent defaults and check subset sizes against the data.

        Args:
            n_predictors: Number of predictor columns available

        Returns:
            A new config with mtr, mlda and mknn set

        Raises:
            ConfigValidationError: If any subset size exceeds n_predictors
        """
        root = math.floor(math.sqrt(n_predictors))
        resolved = dataclasses.replace(
            self,
            mtr=self.mtr if self.mtr is not None else max(1, root),
            mlda=self.mlda if self.mlda is not None else min(n_predictors, max(1, 2 * root)),
            mknn=self.mknn if self.mknn is not None else min(n_predictors, max(1, 2 * root)),
        )

        errors = [
            f"{name}={getattr(resolved, name)} exceeds the number of predictors ({n_predictors})"
            for name in ("mtr", "mlda", "mknn")
            if getattr(resolved, name) > n_predictors
        ]
        if errors:
            raise ConfigValidationError(errors)
        return resolved

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "nclas": self.nclas,
            "ntree": self.ntree,
            "nknn": self.nknn,
            "mtr": self.mtr,
            "mlda": self.mlda,
            "mknn": self.mknn,
            "kknn": self.kknn,
            "weighting": self.weighting.value,
            "random_state": self.random_state,
            "n_jobs": self.n_jobs,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EnsembleConfig":
        """Create EnsembleConfig from dictionary."""
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigValidationError([f"Unknown config keys: {unknown}"])
        if "nclas" not in data:
            raise ConfigValidationError(["Missing required field: nclas"])
        return cls(**data)


def load_config(path: str | Path) -> EnsembleConfig:
    """
    Load an EnsembleConfig from a YAML file.

    The file may hold the fields at top level or under an ``ensemble`` key.

    Raises:
        ConfigError: If the file is missing, unparsable or invalid
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(
            f"Configuration file not found: {path.absolute()}\n"
            f"Suggestion: Check that the file exists and the path is correct."
        )

    try:
        with open(path) as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Failed to parse YAML configuration from {path.absolute()}\n"
            f"Error: {e}"
        ) from e

    if raw is None:
        raise ConfigError(f"Empty config file: {path}")
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file must contain a mapping, got {type(raw).__name__}")

    section = raw.get("ensemble", raw)
    config = EnsembleConfig.from_dict(section)
    logger.debug(f"Loaded config from {path}: {config.to_dict()}")
    return config


def save_config(config: EnsembleConfig, path: str | Path) -> None:
    """Save configuration to YAML file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.safe_dump({"ensemble": config.to_dict()}, f, default_flow_style=False, sort_keys=False)
    logger.info(f"Saved config to {path}")


__all__ = [
    "DEFAULT_NEIGHBOR_COUNT",
    "EnsembleConfig",
    "load_config",
    "save_config",
]
