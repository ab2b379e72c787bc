"""
Discriminant classifier - linear discriminant analysis on a predictor subset.

A bootstrap resample may contain a single class (small data, rare levels).
LDA is undefined there, so the classifier degenerates to predicting that
class for every row.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import numpy as np
from sklearn.discriminant_analysis import LinearDiscriminantAnalysis

from ..base import BaseClassifier
from ..registry import register
from ..specs import Family

logger = logging.getLogger(__name__)


@register(
    name="discriminant",
    description="Linear discriminant analysis on a random predictor subset",
    aliases=["lda"],
)
class DiscriminantClassifier(BaseClassifier):
    """Linear discriminant classifier restricted to its chosen columns."""

    def __init__(self, config: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(config)
        self._model: Optional[LinearDiscriminantAnalysis] = None
        self._constant: Optional[int] = None

    @property
    def family(self) -> Family:
        return Family.DISCRIMINANT

    @property
    def requires_scaling(self) -> bool:
        return False

    def get_default_config(self) -> Dict[str, Any]:
        # lsqr stays defined when the resample has no within-class spread
        return {
            "solver": "lsqr",
            "shrinkage": None,
        }

    def _fit(self, X: np.ndarray, y: np.ndarray, random_state: Optional[int]) -> None:
        classes = np.unique(y)
        if len(classes) < 2:
            self._model = None
            self._constant = int(classes[0])
            logger.warning(
                f"Discriminant resample contains a single class ({self.classes[self._constant]!r}); "
                f"using a constant predictor"
            )
            return

        self._constant = None
        self._model = LinearDiscriminantAnalysis(
            solver=self._config.get("solver", "lsqr"),
            shrinkage=self._config.get("shrinkage"),
        )
        self._model.fit(X, y)

    def _predict(self, X: np.ndarray) -> np.ndarray:
        if self._model is None:
            return np.full(len(X), self._constant, dtype=np.intp)
        return self._model.predict(X)

    @property
    def is_constant(self) -> bool:
        """Whether the classifier collapsed to a single-class predictor."""
        return self._is_fitted and self._model is None


__all__ = ["DiscriminantClassifier"]
