"""
EnsembleModel - the immutable result of ensemble training.

Classifiers are stored in family blocks: all trees, then all discriminant
classifiers, then all distance classifiers. Every per-classifier array
(errors, weights, columns of the per-level matrices) follows that order,
so a family's members are always a contiguous slice.

Per-level matrices have one row per training label level, in the level
order fixed at training time; prediction looks rows up by label through
``level_index``.

The model is assembled once by EnsembleBuilder from per-slot records and
never mutated afterwards: arrays are read-only and the dataclass is frozen.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import joblib
import numpy as np
import pandas as pd

from ..base import BaseClassifier
from ..oob import floor_errors
from ..scaling import ScalingStats
from ..specs import ClassifierSpec, Family
from ..weights import WeightingFormula, compute_weights

logger = logging.getLogger(__name__)

_FAMILY_ORDER = (Family.TREE, Family.DISCRIMINANT, Family.DISTANCE)


def _readonly(values: Any, dtype: Any = np.float64) -> np.ndarray:
    arr = np.array(values, dtype=dtype, copy=True)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True)
class ClassifierRecord:
    """Training outcome of one ensemble slot, before flooring and weighting."""
    classifier: BaseClassifier
    error: float
    level_errors: np.ndarray
    n_oob: int

    @property
    def family(self) -> Family:
        return self.classifier.family


@dataclass(frozen=True, eq=False)
class EnsembleModel:
    """
    Trained heterogeneous ensemble.

    Attributes:
        classifiers: Base classifiers in family-block order
        errors: Floored OOB error per classifier, shape (nclas,)
        level_errors: Floored per-level OOB errors, shape (n_levels, nclas)
        weights: Reliability weight per classifier, shape (nclas,)
        level_weights: Per-level weights, shape (n_levels, nclas)
        levels: Training label levels (row order of the per-level matrices)
        predictors: Predictor names in the column order classifiers expect
        scaling: Scaling statistics used for distance classifiers
        n_obs: Number of training rows
        n_oob: OOB row count per classifier, shape (nclas,)
        ntree, nlda, nknn: Family block sizes
        weighting: Formula used to derive the weights
    """
    classifiers: Tuple[BaseClassifier, ...]
    errors: np.ndarray
    level_errors: np.ndarray
    weights: np.ndarray
    level_weights: np.ndarray
    levels: Tuple
    predictors: Tuple[str, ...]
    scaling: ScalingStats
    n_obs: int
    n_oob: np.ndarray
    ntree: int
    nlda: int
    nknn: int
    weighting: WeightingFormula = WeightingFormula.BOOST
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        nclas = len(self.classifiers)
        if self.ntree + self.nlda + self.nknn != nclas:
            raise ValueError(
                f"Family block sizes ({self.ntree}+{self.nlda}+{self.nknn}) "
                f"!= number of classifiers ({nclas})"
            )
        expected = (
            [Family.TREE] * self.ntree
            + [Family.DISCRIMINANT] * self.nlda
            + [Family.DISTANCE] * self.nknn
        )
        actual = [c.family for c in self.classifiers]
        if actual != expected:
            raise ValueError("Classifiers are not in tree, discriminant, distance block order")
        shape = (len(self.levels), nclas)
        if self.level_errors.shape != shape or self.level_weights.shape != shape:
            raise ValueError(
                f"Per-level matrices must have shape {shape}, got "
                f"{self.level_errors.shape} and {self.level_weights.shape}"
            )

    @property
    def nclas(self) -> int:
        """Total number of classifiers."""
        return len(self.classifiers)

    @property
    def level_index(self) -> Dict[Any, int]:
        """Row of each training level in the per-level matrices."""
        return {level: i for i, level in enumerate(self.levels)}

    @property
    def classifier_names(self) -> List[str]:
        """Names like 'tree_0', 'discriminant_3', 'distance_5' in classifier order."""
        return [f"{c.family.value}_{i}" for i, c in enumerate(self.classifiers)]

    def family_slice(self, family: Family | str) -> slice:
        """Contiguous slice of classifier positions belonging to a family."""
        family = Family(family)
        sizes = {Family.TREE: self.ntree, Family.DISCRIMINANT: self.nlda, Family.DISTANCE: self.nknn}
        start = 0
        for f in _FAMILY_ORDER:
            if f is family:
                return slice(start, start + sizes[f])
            start += sizes[f]
        raise ValueError(f"Unknown family: {family}")

    def summary(self) -> pd.DataFrame:
        """
        Per-family overview: classifier count, mean OOB error and share of
        the total weight (NaN for empty families or an all-zero weight vector).
        """
        total = float(self.weights.sum())
        rows = []
        for family in _FAMILY_ORDER:
            sl = self.family_slice(family)
            count = sl.stop - sl.start
            rows.append({
                "family": family.value,
                "count": count,
                "mean_error": float(self.errors[sl].mean()) if count else np.nan,
                "weight_share": float(self.weights[sl].sum()) / total if count and total > 0 else np.nan,
            })
        return pd.DataFrame(rows).set_index("family")

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def save(self, path: str | Path) -> None:
        """Save classifiers and metadata to a directory."""
        path = Path(path)
        path.mkdir(parents=True, exist_ok=True)

        joblib.dump(list(self.classifiers), path / "classifiers.joblib")
        metadata = {
            "errors": np.asarray(self.errors),
            "level_errors": np.asarray(self.level_errors),
            "weights": np.asarray(self.weights),
            "level_weights": np.asarray(self.level_weights),
            "levels": list(self.levels),
            "predictors": list(self.predictors),
            "scaling": self.scaling.to_dict(),
            "n_obs": self.n_obs,
            "n_oob": np.asarray(self.n_oob),
            "ntree": self.ntree,
            "nlda": self.nlda,
            "nknn": self.nknn,
            "weighting": self.weighting.value,
            "metadata": dict(self.metadata),
        }
        joblib.dump(metadata, path / "metadata.joblib")
        logger.info(f"Saved EnsembleModel ({self.nclas} classifiers) to {path}")

    @classmethod
    def load(cls, path: str | Path) -> "EnsembleModel":
        """Load a model saved with save()."""
        path = Path(path)
        classifiers_path = path / "classifiers.joblib"
        metadata_path = path / "metadata.joblib"
        for p in (classifiers_path, metadata_path):
            if not p.exists():
                raise FileNotFoundError(f"Ensemble file not found: {p}")

        classifiers = joblib.load(classifiers_path)
        meta = joblib.load(metadata_path)
        scaling = meta["scaling"]

        model = cls(
            classifiers=tuple(classifiers),
            errors=_readonly(meta["errors"]),
            level_errors=_readonly(meta["level_errors"]),
            weights=_readonly(meta["weights"]),
            level_weights=_readonly(meta["level_weights"]),
            levels=tuple(meta["levels"]),
            predictors=tuple(meta["predictors"]),
            scaling=ScalingStats(
                mean=scaling["mean"], sd=scaling["sd"], n=scaling["n"], names=scaling["names"],
            ),
            n_obs=meta["n_obs"],
            n_oob=_readonly(meta["n_oob"], dtype=np.int64),
            ntree=meta["ntree"],
            nlda=meta["nlda"],
            nknn=meta["nknn"],
            weighting=WeightingFormula.parse(meta["weighting"]),
            metadata=meta.get("metadata", {}),
        )
        logger.info(f"Loaded EnsembleModel ({model.nclas} classifiers) from {path}")
        return model

    def __repr__(self) -> str:
        return (
            f"EnsembleModel(nclas={self.nclas}, ntree={self.ntree}, nlda={self.nlda}, "
            f"nknn={self.nknn}, levels={list(self.levels)}, weighting={self.weighting.value})"
        )


class EnsembleBuilder:
    """
    Collects per-slot training records into fixed positions and assembles
    the EnsembleModel once every slot is filled.

    Slots may be filled in any order (e.g. from worker threads); the final
    model always follows slot order.
    """

    def __init__(self, specs: Sequence[ClassifierSpec], levels: Sequence, n_obs: int) -> None:
        self._specs = list(specs)
        self._levels = tuple(levels)
        self._n_obs = n_obs
        self._records: List[Optional[ClassifierRecord]] = [None] * len(self._specs)

    def add(self, slot: int, record: ClassifierRecord) -> None:
        """Place a record into its slot."""
        if not 0 <= slot < len(self._specs):
            raise IndexError(f"Slot {slot} out of range [0, {len(self._specs)})")
        if self._records[slot] is not None:
            raise ValueError(f"Slot {slot} is already filled")
        if record.family is not self._specs[slot].family:
            raise ValueError(
                f"Slot {slot} expects a {self._specs[slot].family.value} classifier, "
                f"got {record.family.value}"
            )
        if len(record.level_errors) != len(self._levels):
            raise ValueError(
                f"Record has {len(record.level_errors)} level errors, expected {len(self._levels)}"
            )
        self._records[slot] = record

    def build(
        self,
        weighting: WeightingFormula,
        scaling: ScalingStats,
        predictors: Sequence[str],
        metadata: Optional[Dict[str, Any]] = None,
    ) -> EnsembleModel:
        """
        Floor the errors, derive the weights and freeze the model.

        Raises:
            RuntimeError: If any slot is still empty
        """
        missing = [i for i, r in enumerate(self._records) if r is None]
        if missing:
            raise RuntimeError(f"Cannot build ensemble, slots not trained: {missing}")

        records = self._records
        raw_errors = np.array([r.error for r in records], dtype=np.float64)
        raw_level_errors = np.column_stack([r.level_errors for r in records])

        errors = floor_errors(raw_errors, self._n_obs)
        level_errors = floor_errors(raw_level_errors, self._n_obs)
        weights = compute_weights(errors, weighting)
        level_weights = compute_weights(level_errors, weighting)

        counts = {f: sum(1 for s in self._specs if s.family is f) for f in _FAMILY_ORDER}
        return EnsembleModel(
            classifiers=tuple(r.classifier for r in records),
            errors=_readonly(errors),
            level_errors=_readonly(level_errors),
            weights=_readonly(weights),
            level_weights=_readonly(level_weights),
            levels=self._levels,
            predictors=tuple(predictors),
            scaling=scaling,
            n_obs=self._n_obs,
            n_oob=_readonly([r.n_oob for r in records], dtype=np.int64),
            ntree=counts[Family.TREE],
            nlda=counts[Family.DISCRIMINANT],
            nknn=counts[Family.DISTANCE],
            weighting=weighting,
            metadata=dict(metadata or {}),
        )


__all__ = [
    "ClassifierRecord",
    "EnsembleModel",
    "EnsembleBuilder",
]
