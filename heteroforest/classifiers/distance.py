"""
Distance classifier - k-nearest-neighbor voting on scaled predictors.

Uses Euclidean distance over the chosen predictor subset. The caller is
responsible for passing standardised predictors (see scaling.scale()).
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import numpy as np
from sklearn.neighbors import KNeighborsClassifier

from ..base import BaseClassifier
from ..registry import register
from ..specs import Family

logger = logging.getLogger(__name__)


@register(
    name="distance",
    description="k-nearest-neighbor classifier on scaled predictors",
    aliases=["knn"],
)
class DistanceClassifier(BaseClassifier):
    """k-nearest-neighbor classifier restricted to its chosen columns."""

    def __init__(self, config: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(config)
        self._model: Optional[KNeighborsClassifier] = None

    @property
    def family(self) -> Family:
        return Family.DISTANCE

    @property
    def requires_scaling(self) -> bool:
        return True

    def get_default_config(self) -> Dict[str, Any]:
        return {
            "n_neighbors": 5,
            "metric": "euclidean",
        }

    def _fit(self, X: np.ndarray, y: np.ndarray, random_state: Optional[int]) -> None:
        n_neighbors = int(self._config.get("n_neighbors", 5))
        if n_neighbors > len(X):
            raise ValueError(
                f"n_neighbors ({n_neighbors}) exceeds the training sample size ({len(X)})"
            )
        self._model = KNeighborsClassifier(
            n_neighbors=n_neighbors,
            metric=self._config.get("metric", "euclidean"),
        )
        self._model.fit(X, y)

    def _predict(self, X: np.ndarray) -> np.ndarray:
        return self._model.predict(X)


__all__ = ["DistanceClassifier"]
