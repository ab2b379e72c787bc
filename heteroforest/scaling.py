"""
Feature scaling statistics for distance-based classifiers.

Distance classifiers work on standardised predictors. The statistics used
for standardisation are either supplied by the caller or derived from the
data:

- at training time from the training frame (compute_stats)
- at prediction time by combining the stored training statistics with those
  of the new batch (combine_stats)

The combined standard deviation is the square root of the sample-size
weighted average of the two variances. This is an approximation, not the
pooled variance of the union: it ignores the spread between the two means.

Usage:
    stats = compute_stats(X_train)
    X_scaled = scale(X_train, stats)

    batch = compute_stats(X_new)
    combined = combine_stats(stats.mean, stats.sd, stats.n,
                             batch.mean, batch.sd, batch.n)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

import numpy as np

from .exceptions import DataError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class ScalingStats:
    """Per-predictor mean and standard deviation, with the sample size they came from."""
    mean: np.ndarray
    sd: np.ndarray
    n: int = 0
    names: Optional[Sequence[str]] = None

    def __post_init__(self) -> None:
        mean = np.array(self.mean, dtype=np.float64).reshape(-1)
        sd = np.array(self.sd, dtype=np.float64).reshape(-1)
        if mean.shape != sd.shape:
            raise DataError(
                f"Scaling mean length ({mean.size}) != sd length ({sd.size})"
            )
        mean.setflags(write=False)
        sd.setflags(write=False)
        object.__setattr__(self, "mean", mean)
        object.__setattr__(self, "sd", sd)

    @property
    def n_features(self) -> int:
        return self.mean.size

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "mean": self.mean.tolist(),
            "sd": self.sd.tolist(),
            "n": self.n,
            "names": list(self.names) if self.names is not None else None,
        }


def compute_stats(X: np.ndarray, names: Optional[Sequence[str]] = None) -> ScalingStats:
    """
    Column means and sample standard deviations (ddof=1) of a predictor matrix.

    A single row has no spread; its standard deviation is reported as 0.
    An empty matrix yields NaN means and zero deviations with n=0.
    """
    X = np.asarray(X, dtype=np.float64)
    n = X.shape[0]
    if n == 0:
        return ScalingStats(
            mean=np.full(X.shape[1], np.nan),
            sd=np.zeros(X.shape[1]),
            n=0,
            names=names,
        )
    mean = X.mean(axis=0)
    sd = X.std(axis=0, ddof=1) if n > 1 else np.zeros(X.shape[1])
    return ScalingStats(mean=mean, sd=sd, n=n, names=names)


def combine_stats(
    train_mean: np.ndarray,
    train_sd: np.ndarray,
    train_n: int,
    batch_mean: np.ndarray,
    batch_sd: np.ndarray,
    batch_n: int,
) -> ScalingStats:
    """
    Combine training statistics with the statistics of a new batch.

    mean = (train_mean * train_n + batch_mean * batch_n) / (train_n + batch_n)
    sd   = sqrt((train_sd^2 * train_n + batch_sd^2 * batch_n) / (train_n + batch_n))

    A batch of size 0 leaves the training statistics unchanged.
    """
    train_mean = np.asarray(train_mean, dtype=np.float64)
    train_sd = np.asarray(train_sd, dtype=np.float64)
    if batch_n == 0:
        return ScalingStats(mean=train_mean.copy(), sd=train_sd.copy(), n=train_n)

    batch_mean = np.asarray(batch_mean, dtype=np.float64)
    batch_sd = np.asarray(batch_sd, dtype=np.float64)
    if batch_mean.shape != train_mean.shape:
        raise DataError(
            f"Batch has {batch_mean.size} predictors, training stats have {train_mean.size}"
        )

    total = train_n + batch_n
    logger.debug(f"Combining scaling stats: train_n={train_n}, batch_n={batch_n}")
    mean = (train_mean * train_n + batch_mean * batch_n) / total
    sd = np.sqrt((train_sd ** 2 * train_n + batch_sd ** 2 * batch_n) / total)
    return ScalingStats(mean=mean, sd=sd, n=total)


def check_scalable(stats: ScalingStats, names: Optional[Sequence[str]] = None) -> None:
    """
    Raise DataError if any predictor has zero (or undefined) spread.

    Args:
        stats: Statistics to check
        names: Predictor names for the error message
    """
    bad = ~np.isfinite(stats.sd) | (stats.sd <= 0.0)
    if bad.any():
        labels = names if names is not None else stats.names
        if labels is not None:
            offending = [labels[i] for i in np.flatnonzero(bad)]
        else:
            offending = np.flatnonzero(bad).tolist()
        raise DataError(
            f"Cannot scale predictors with zero or undefined standard deviation: {offending}"
        )


def scale(X: np.ndarray, stats: ScalingStats) -> np.ndarray:
    """Standardise columns of X: (X - mean) / sd."""
    X = np.asarray(X, dtype=np.float64)
    if X.shape[1] != stats.n_features:
        raise DataError(
            f"Matrix has {X.shape[1]} predictors, scaling stats have {stats.n_features}"
        )
    check_scalable(stats)
    return (X - stats.mean) / stats.sd


__all__ = [
    "ScalingStats",
    "compute_stats",
    "combine_stats",
    "check_scalable",
    "scale",
]
