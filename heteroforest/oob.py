"""
Out-of-bag error estimation.

Every base classifier is evaluated on the rows its bootstrap resample
never drew. Two error measures are kept per classifier:

- global error: fraction of OOB rows misclassified
- per-level error: for each label level j, the misclassification rate
  among OOB rows the classifier *predicted* as j

A level the classifier never predicted carries no direct evidence. It is
scored 0 when no OOB row truly belongs to it and 1 otherwise.

Zero errors are floored once all classifiers have been evaluated, because
every weighting formula diverges at e = 0.
"""
from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

logger = logging.getLogger(__name__)

# Zero errors become mean(errors) / ERROR_FLOOR_DIVISOR
ERROR_FLOOR_DIVISOR = 1000


def oob_error(predicted: np.ndarray, truth: np.ndarray) -> float:
    """
    Fraction of out-of-bag rows misclassified.

    An empty out-of-bag set misclassifies nothing and scores 0.
    """
    predicted = np.asarray(predicted, dtype=object)
    truth = np.asarray(truth, dtype=object)
    if len(truth) == 0:
        return 0.0
    return float(np.mean(predicted != truth))


def level_oob_errors(
    predicted: np.ndarray,
    truth: np.ndarray,
    levels: Sequence,
) -> np.ndarray:
    """
    Per-level out-of-bag error of one classifier.

    Args:
        predicted: Predicted labels of the OOB rows
        truth: True labels of the OOB rows
        levels: Label levels in training order

    Returns:
        Array of shape (len(levels),)
    """
    predicted = np.asarray(predicted, dtype=object)
    truth = np.asarray(truth, dtype=object)
    errors = np.empty(len(levels), dtype=np.float64)

    for j, level in enumerate(levels):
        predicted_as = predicted == level
        if predicted_as.any():
            errors[j] = float(np.mean(truth[predicted_as] != level))
        elif (truth == level).any():
            errors[j] = 1.0
        else:
            errors[j] = 0.0
    return errors


def floor_errors(errors: np.ndarray, n_obs: int) -> np.ndarray:
    """
    Replace exact zeros with a small positive error.

    The floor is mean(errors) / ERROR_FLOOR_DIVISOR, with the mean taken
    over the whole array before any entry is replaced. Non-zero entries are
    returned unchanged. When every entry is zero the mean gives no scale;
    the floor is then 1 / (ERROR_FLOOR_DIVISOR * n_obs), below the smallest
    error n_obs rows can show.

    Args:
        errors: Error vector or levels x classifiers matrix
        n_obs: Number of training rows

    Returns:
        Floored copy of ``errors``
    """
    errors = np.asarray(errors, dtype=np.float64)
    floored = errors.copy()
    zeros = errors == 0.0
    if not zeros.any():
        return floored

    floor = float(errors.mean()) / ERROR_FLOOR_DIVISOR
    if floor == 0.0:
        floor = 1.0 / (ERROR_FLOOR_DIVISOR * max(n_obs, 1))
        logger.warning(
            f"All {errors.size} OOB errors are zero; flooring them to {floor:.3g}"
        )

    floored[zeros] = floor
    logger.debug(f"Floored {int(zeros.sum())} of {errors.size} zero errors to {floor:.3g}")
    return floored


__all__ = [
    "ERROR_FLOOR_DIVISOR",
    "oob_error",
    "level_oob_errors",
    "floor_errors",
]
