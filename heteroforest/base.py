"""
BaseClassifier abstract interface for ensemble members.

Every base classifier, whatever its family, is trained on a predictor
matrix restricted to its own column subset and exposes one capability
to the ensemble: predict(X) -> labels.

Column subsets are stored as indices into the ensemble's predictor order,
so predict() always receives the full, realigned predictor matrix and
selects its own columns.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Sequence

import numpy as np

from .specs import Family


class BaseClassifier(ABC):
    """
    Abstract base class for all base classifiers in the ensemble.

    Subclasses must implement:
        - family (property): Family tag of the classifier
        - requires_scaling (property): Whether inputs must be standardised
        - get_default_config(): Default hyperparameters
        - _fit(): Training on the column-restricted matrix and integer label codes
        - _predict(): Integer label codes for the column-restricted matrix

    Example:
        >>> model = ClassifierRegistry.create("tree", config={"max_features": 2})
        >>> model.fit(X, y, random_state=7)
        >>> labels = model.predict(X_new)
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize the classifier.

        Args:
            config: Hyperparameter overrides. If None, uses defaults
                   from get_default_config().
        """
        self._config = self._merge_config(config)
        self._is_fitted = False
        self._columns: Optional[np.ndarray] = None
        self._n_features: Optional[int] = None
        self._classes: Optional[np.ndarray] = None

    def _merge_config(self, config: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Merge provided config with defaults."""
        defaults = self.get_default_config()
        if config is None:
            return defaults
        merged = defaults.copy()
        merged.update(config)
        return merged

    @property
    def config(self) -> Dict[str, Any]:
        """Current classifier configuration."""
        return self._config

    @property
    def is_fitted(self) -> bool:
        """Whether the classifier has been trained."""
        return self._is_fitted

    @property
    def columns(self) -> Optional[np.ndarray]:
        """Indices of the predictor columns this classifier uses."""
        return self._columns

    @property
    def classes(self) -> Optional[np.ndarray]:
        """Labels seen during training."""
        return self._classes

    # =========================================================================
    # ABSTRACT INTERFACE
    # =========================================================================

    @property
    @abstractmethod
    def family(self) -> Family:
        """Return the family tag."""
        pass

    @property
    @abstractmethod
    def requires_scaling(self) -> bool:
        """Whether this classifier expects standardised predictors."""
        pass

    @abstractmethod
    def get_default_config(self) -> Dict[str, Any]:
        """Return default hyperparameters for this classifier."""
        pass

    @abstractmethod
    def _fit(self, X: np.ndarray, y: np.ndarray, random_state: Optional[int]) -> None:
        """Train on the column-restricted matrix; y holds integer codes into classes."""
        pass

    @abstractmethod
    def _predict(self, X: np.ndarray) -> np.ndarray:
        """Predict integer label codes for the column-restricted matrix."""
        pass

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def fit(
        self,
        X: np.ndarray,
        y: np.ndarray,
        columns: Optional[Sequence[int]] = None,
        random_state: Optional[int] = None,
    ) -> "BaseClassifier":
        """
        Train the classifier.

        Args:
            X: Full predictor matrix, shape (n_samples, n_predictors)
            y: Labels, shape (n_samples,); any hashable, mutually sortable values
            columns: Predictor indices to train on (None = all columns)
            random_state: Seed for any randomness inside the learner

        Returns:
            self

        Raises:
            ValueError: If input shapes are invalid
        """
        X = np.asarray(X, dtype=np.float64)
        y = np.asarray(y, dtype=object)
        self._validate_input_shape(X, "X")
        if len(X) != len(y):
            raise ValueError(f"X has {len(X)} rows but y has {len(y)} labels")
        if len(X) == 0:
            raise ValueError("Cannot fit on an empty sample")

        if columns is None:
            columns = np.arange(X.shape[1])
        self._columns = np.asarray(columns, dtype=np.intp)
        self._n_features = X.shape[1]

        # learners see integer codes into self._classes
        classes, codes = np.unique(y, return_inverse=True)
        self._classes = np.asarray(classes, dtype=object)
        self._fit(X[:, self._columns], codes.astype(np.intp), random_state)
        self._is_fitted = True
        return self

    def predict(self, X: np.ndarray) -> np.ndarray:
        """
        Predict labels.

        Args:
            X: Full predictor matrix in ensemble predictor order

        Returns:
            Labels, shape (n_samples,), object dtype

        Raises:
            RuntimeError: If classifier is not fitted
            ValueError: If input shape is invalid
        """
        self._validate_fitted()
        X = np.asarray(X, dtype=np.float64)
        self._validate_input_shape(X, "X")
        if X.shape[1] != self._n_features:
            raise ValueError(
                f"X has {X.shape[1]} predictors, classifier was trained on {self._n_features}"
            )
        if len(X) == 0:
            return np.empty(0, dtype=object)
        codes = np.asarray(self._predict(X[:, self._columns]), dtype=np.intp)
        return self._classes[codes]

    # =========================================================================
    # VALIDATION HELPERS
    # =========================================================================

    def _validate_input_shape(self, X: np.ndarray, context: str = "input") -> None:
        """Require a 2D (n_samples, n_predictors) matrix."""
        if X.ndim != 2:
            raise ValueError(
                f"{context} must be 2D (n_samples, n_predictors), got shape {X.shape}"
            )

    def _validate_fitted(self) -> None:
        """Raise RuntimeError if the classifier is not fitted."""
        if not self._is_fitted:
            raise RuntimeError(
                f"{self.__class__.__name__} is not fitted. Call fit() first."
            )

    def __repr__(self) -> str:
        columns = self._columns.tolist() if self._columns is not None else None
        return (
            f"{self.__class__.__name__}("
            f"family={self.family.value}, "
            f"columns={columns}, "
            f"fitted={self._is_fitted})"
        )


__all__ = ["BaseClassifier"]
