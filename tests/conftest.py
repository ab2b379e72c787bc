"""
Shared fixtures for heteroforest tests.

Provides:
- Synthetic 3-class tabular frames (training and new observations)
- Small, fast ensemble configurations and a pre-trained model
- A stub classifier and a factory building EnsembleModels with fixed
  predictions and weights, for exact voting checks
"""
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd
import pytest

from heteroforest import EnsembleConfig, ScalingStats, train_ensemble
from heteroforest.base import BaseClassifier
from heteroforest.ensemble import EnsembleModel
from heteroforest.specs import Family


# =============================================================================
# DATA FIXTURES
# =============================================================================

def _make_frame(n_rows: int, seed: int, separation: float = 4.0) -> pd.DataFrame:
    """Three classes shifted along f1/f2; f3/f4 are noise."""
    rng = np.random.RandomState(seed)
    labels = rng.choice(["a", "b", "c"], size=n_rows)
    shift = {"a": (0.0, 0.0), "b": (separation, 0.0), "c": (0.0, separation)}

    f1 = np.array([shift[l][0] for l in labels]) + rng.randn(n_rows)
    f2 = np.array([shift[l][1] for l in labels]) + rng.randn(n_rows)
    return pd.DataFrame({
        "f1": f1,
        "f2": f2,
        "f3": rng.randn(n_rows),
        "f4": rng.uniform(-1, 1, size=n_rows),
        "species": labels,
    })


@pytest.fixture
def classification_frame() -> pd.DataFrame:
    """
    Training frame with 90 rows.

    Columns: f1, f2, f3, f4 (numeric predictors), species (label in {a, b, c})
    """
    np.random.seed(42)
    return _make_frame(90, seed=42)


@pytest.fixture
def new_frame() -> pd.DataFrame:
    """30 new observations from the same distribution, label included."""
    return _make_frame(30, seed=7)


@pytest.fixture
def frame_factory():
    """Factory for synthetic frames: frame_factory(n_rows, seed, separation=4.0)."""
    return _make_frame


@pytest.fixture
def tiny_frame() -> pd.DataFrame:
    """Six observations, two predictors, label in {A, B}."""
    return pd.DataFrame({
        "x1": [0.10, 0.40, 0.35, 0.80, 0.90, 0.75],
        "x2": [1.00, 0.90, 0.70, 0.20, 0.30, 0.10],
        "y": ["A", "A", "A", "B", "B", "B"],
    })


# =============================================================================
# CONFIG / MODEL FIXTURES
# =============================================================================

@pytest.fixture
def fast_config() -> EnsembleConfig:
    """Nine classifiers: three of each family."""
    return EnsembleConfig(nclas=9, ntree=3, nknn=3, kknn=3, random_state=7)


@pytest.fixture
def trained_model(classification_frame, fast_config) -> EnsembleModel:
    """Ensemble trained on classification_frame with fast_config."""
    return train_ensemble(classification_frame, "species", fast_config)


# =============================================================================
# STUB MODELS
# =============================================================================

class StubClassifier(BaseClassifier):
    """
    Test double predicting a fixed label sequence.

    Config:
        family: Family tag reported to the ensemble
        labels: Labels returned for rows 0, 1, 2, ... (cycled)
    """

    @property
    def family(self) -> Family:
        return Family(self._config["family"])

    @property
    def requires_scaling(self) -> bool:
        return self.family is Family.DISTANCE

    def get_default_config(self) -> Dict[str, Any]:
        return {"family": Family.TREE, "labels": ["A"]}

    def _fit(self, X, y, random_state):
        # codes index into the fixed label sequence
        self._classes = np.array(self._config["labels"], dtype=object)

    def _predict(self, X):
        return np.resize(np.arange(len(self._classes)), len(X))


STUB_PREDICTORS = ("x1", "x2")


@pytest.fixture
def make_stub_model():
    """
    Factory for EnsembleModels with fixed predictions and weights.

    Args:
        predictions: One label sequence per classifier
        levels: Training levels (row order of level_weights)
        weights: Global weights (default all ones)
        level_weights: Per-level weights, shape (len(levels), nclas)
        families: Family per classifier (default all trees)
    """
    def _make(
        predictions: List[Sequence],
        levels: Sequence = ("A", "B"),
        weights: Optional[Sequence[float]] = None,
        level_weights: Optional[Sequence[Sequence[float]]] = None,
        families: Optional[Sequence[Family]] = None,
    ) -> EnsembleModel:
        nclas = len(predictions)
        families = list(families) if families is not None else [Family.TREE] * nclas
        classifiers = []
        for labels, family in zip(predictions, families):
            stub = StubClassifier(config={"family": family, "labels": list(labels)})
            stub.fit(np.zeros((2, len(STUB_PREDICTORS))), np.array(["A", "B"], dtype=object))
            classifiers.append(stub)

        n_levels = len(levels)
        weights = np.ones(nclas) if weights is None else np.asarray(weights, dtype=float)
        if level_weights is None:
            level_weights = np.ones((n_levels, nclas))
        level_weights = np.asarray(level_weights, dtype=float)

        return EnsembleModel(
            classifiers=tuple(classifiers),
            errors=np.full(nclas, 0.25),
            level_errors=np.full((n_levels, nclas), 0.25),
            weights=weights,
            level_weights=level_weights,
            levels=tuple(levels),
            predictors=STUB_PREDICTORS,
            scaling=ScalingStats(mean=np.zeros(2), sd=np.ones(2), n=10, names=list(STUB_PREDICTORS)),
            n_obs=10,
            n_oob=np.full(nclas, 3),
            ntree=families.count(Family.TREE),
            nlda=families.count(Family.DISCRIMINANT),
            nknn=families.count(Family.DISTANCE),
        )

    return _make


@pytest.fixture
def stub_frame():
    """Factory for prediction frames with the stub predictors."""
    def _make(n_rows: int) -> pd.DataFrame:
        rng = np.random.RandomState(0)
        return pd.DataFrame({"x1": rng.randn(n_rows), "x2": rng.randn(n_rows)})
    return _make
