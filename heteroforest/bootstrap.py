"""
Base classifier training on bootstrap resamples.

One call trains one ensemble member:

1. Draw n row indices with replacement (n = number of training rows).
2. Choose the predictor columns:
   - tree: all columns; the learner samples ``subset_size`` per split
   - discriminant / distance: ``subset_size`` columns without replacement
3. Fit the family's classifier on the resampled rows and chosen columns
   (distance classifiers on the scaled matrix).
4. Report the out-of-bag rows: indices never drawn.

All randomness comes from the ``numpy.random.Generator`` passed in, so a
slot trained with the same generator state is reproduced exactly.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .base import BaseClassifier
from .registry import ClassifierRegistry
from .specs import ClassifierSpec, Family

logger = logging.getLogger(__name__)

# Upper bound for seeds handed to scikit-learn learners
_MAX_SEED = 2 ** 31 - 1


@dataclass(frozen=True)
class BootstrapFit:
    """A trained base classifier and the rows it never saw."""
    classifier: BaseClassifier
    oob_rows: np.ndarray

    @property
    def n_oob(self) -> int:
        return len(self.oob_rows)


def bootstrap_rows(n_obs: int, rng: np.random.Generator) -> tuple[np.ndarray, np.ndarray]:
    """
    Draw a bootstrap resample of row indices.

    Returns:
        Tuple of (in-bag indices of length n_obs, sorted out-of-bag indices)
    """
    in_bag = rng.integers(0, n_obs, size=n_obs)
    drawn = np.zeros(n_obs, dtype=bool)
    drawn[in_bag] = True
    return in_bag, np.flatnonzero(~drawn)


def choose_columns(n_predictors: int, subset_size: int, rng: np.random.Generator) -> np.ndarray:
    """Choose ``subset_size`` distinct predictor indices."""
    if subset_size > n_predictors:
        raise ValueError(
            f"Cannot choose {subset_size} predictors out of {n_predictors}"
        )
    return rng.choice(n_predictors, size=subset_size, replace=False)


def train_base_classifier(
    spec: ClassifierSpec,
    X: np.ndarray,
    y: np.ndarray,
    rng: np.random.Generator,
    X_scaled: Optional[np.ndarray] = None,
) -> BootstrapFit:
    """
    Train one base classifier of the spec's family on a bootstrap resample.

    Args:
        spec: Slot specification (family and hyperparameters)
        X: Unscaled predictor matrix, shape (n_obs, n_predictors)
        y: Labels, shape (n_obs,)
        rng: Random stream owned by this slot
        X_scaled: Scaled predictor matrix (required for distance classifiers)

    Returns:
        BootstrapFit with the trained classifier and its out-of-bag rows
    """
    n_obs, n_predictors = X.shape
    in_bag, oob_rows = bootstrap_rows(n_obs, rng)

    if spec.family is Family.TREE:
        columns = np.arange(n_predictors)
        source = X
    else:
        columns = choose_columns(n_predictors, spec.subset_size, rng)
        if spec.family is Family.DISTANCE:
            if X_scaled is None:
                raise ValueError("Distance classifiers require the scaled predictor matrix")
            source = X_scaled
        else:
            source = X

    seed = int(rng.integers(0, _MAX_SEED))
    classifier = ClassifierRegistry.create(spec.family, config=spec.model_config())
    classifier.fit(source[in_bag], y[in_bag], columns=columns, random_state=seed)

    logger.debug(
        f"Trained {spec.family.value} classifier: columns={columns.tolist()}, "
        f"in_bag_unique={n_obs - len(oob_rows)}, oob={len(oob_rows)}"
    )
    return BootstrapFit(classifier=classifier, oob_rows=oob_rows)


__all__ = [
    "BootstrapFit",
    "bootstrap_rows",
    "choose_columns",
    "train_base_classifier",
]
