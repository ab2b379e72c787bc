"""
Error-to-weight conversion for ensemble members.

Each classifier's out-of-bag error rate ``e`` is mapped to a non-negative
reliability weight by one of three formulas:

    boost       w = ln((1 - e) / e)
    reciprocal  w = (1 - 2e) / e
    square      w = (1 - 2e) / e^2

Negative weights (classifiers no better than chance) are clamped to zero.
The same conversion is applied to the global error vector and, element-wise,
to the per-level error matrix.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Dict, Union

import numpy as np

from .exceptions import NumericError, UnsupportedOptionError

logger = logging.getLogger(__name__)


class WeightingFormula(str, Enum):
    """Closed set of supported weighting formulas."""

    BOOST = "boost"
    RECIPROCAL = "reciprocal"
    SQUARE = "square"

    @classmethod
    def parse(cls, value: Union[str, "WeightingFormula"]) -> "WeightingFormula":
        """
        Resolve a formula from its name.

        Accepts the enum itself, its value, or the short names used by older
        configurations ("rec", "sq").

        Raises:
            UnsupportedOptionError: If the name is not a known formula
        """
        if isinstance(value, cls):
            return value
        name = str(value).lower().strip()
        name = _ALIASES.get(name, name)
        try:
            return cls(name)
        except ValueError:
            valid = [f.value for f in cls]
            raise UnsupportedOptionError(
                f"Unknown weighting formula '{value}'. Must be one of: {valid}"
            ) from None


_ALIASES = {"rec": "reciprocal", "sq": "square"}


def _boost(errors: np.ndarray) -> np.ndarray:
    return np.log((1.0 - errors) / errors)


def _reciprocal(errors: np.ndarray) -> np.ndarray:
    return (1.0 - 2.0 * errors) / errors


def _square(errors: np.ndarray) -> np.ndarray:
    return (1.0 - 2.0 * errors) / errors ** 2


_FORMULAS: Dict[WeightingFormula, Callable[[np.ndarray], np.ndarray]] = {
    WeightingFormula.BOOST: _boost,
    WeightingFormula.RECIPROCAL: _reciprocal,
    WeightingFormula.SQUARE: _square,
}


def compute_weights(
    errors: np.ndarray,
    formula: Union[str, WeightingFormula] = WeightingFormula.BOOST,
) -> np.ndarray:
    """
    Convert error rates into non-negative weights.

    Args:
        errors: Error rates in (0, 1], any shape (vector or levels x classifiers)
        formula: Weighting formula or its name

    Returns:
        Array of weights with the same shape as ``errors``

    Raises:
        NumericError: If any error is NaN or outside (0, 1]
        UnsupportedOptionError: If the formula name is unknown
    """
    formula = WeightingFormula.parse(formula)
    errors = np.asarray(errors, dtype=np.float64)

    invalid = np.isnan(errors) | (errors <= 0.0) | (errors > 1.0)
    if invalid.any():
        raise NumericError(
            f"Error rates must lie in (0, 1] before weighting; "
            f"got {errors[invalid].tolist()}. Apply floor_errors() first."
        )

    # e == 1 gives log(0) for the boost formula; clamped to zero below
    with np.errstate(divide="ignore"):
        weights = _FORMULAS[formula](errors)

    weights = np.where(weights < 0.0, 0.0, weights)
    logger.debug(
        f"Computed {formula.value} weights for {errors.size} error values "
        f"({int(np.count_nonzero(weights == 0.0))} at zero)"
    )
    return weights


__all__ = ["WeightingFormula", "compute_weights"]
