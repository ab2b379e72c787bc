"""
Tree classifier - a single randomised decision tree.

Grown to full depth on a bootstrap resample. At every split only a random
subset of ``max_features`` predictors is considered, drawn independently per
split by scikit-learn's DecisionTreeClassifier. Tree predictions are
scale-invariant, so the tree sees unscaled predictors.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import numpy as np
from sklearn.tree import DecisionTreeClassifier

from ..base import BaseClassifier
from ..registry import register
from ..specs import Family

logger = logging.getLogger(__name__)


@register(
    name="tree",
    description="Randomised decision tree (per-split predictor sampling)",
    aliases=["decision_tree"],
)
class TreeClassifier(BaseClassifier):
    """Decision tree with per-split random predictor subsets."""

    def __init__(self, config: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(config)
        self._model: Optional[DecisionTreeClassifier] = None

    @property
    def family(self) -> Family:
        return Family.TREE

    @property
    def requires_scaling(self) -> bool:
        return False

    def get_default_config(self) -> Dict[str, Any]:
        return {
            "max_features": None,
            "criterion": "gini",
            "min_samples_leaf": 1,
        }

    def _fit(self, X: np.ndarray, y: np.ndarray, random_state: Optional[int]) -> None:
        max_features = self._config.get("max_features")
        if max_features is not None:
            max_features = min(int(max_features), X.shape[1])

        self._model = DecisionTreeClassifier(
            criterion=self._config.get("criterion", "gini"),
            max_features=max_features,
            min_samples_leaf=self._config.get("min_samples_leaf", 1),
            random_state=random_state,
        )
        self._model.fit(X, y)
        logger.debug(
            f"Grew tree: depth={self._model.get_depth()}, "
            f"leaves={self._model.get_n_leaves()}, max_features={max_features}"
        )

    def _predict(self, X: np.ndarray) -> np.ndarray:
        return self._model.predict(X)

    @property
    def depth(self) -> Optional[int]:
        """Depth of the fitted tree."""
        return self._model.get_depth() if self._model is not None else None


__all__ = ["TreeClassifier"]
