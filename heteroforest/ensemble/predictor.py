"""
EnsemblePredictor - applies a trained EnsembleModel to new data.

Prediction produces the matrix of individual classifier predictions and
two aggregated label vectors:

- ``aggregated``: unweighted majority vote, or the vote weighted by each
  classifier's global weight when ``use_weights`` is set
- ``aggregated_by_level``: vote weighted per level; a vote for level j
  counts with the classifier's weight for j, normalised by the total weight
  of row j. This aggregate is computed regardless of ``use_weights``.

Levels are the sorted union of all predicted labels. Ties go to the first
level in that order.
"""
from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import List, Optional

import numpy as np
import pandas as pd

from ..data import predictor_matrix
from ..exceptions import DataError
from ..scaling import ScalingStats, check_scalable, combine_stats, compute_stats, scale
from ..specs import Family
from .model import EnsembleModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class VotingResult:
    """
    Outcome of one prediction call.

    Attributes:
        aggregated: Winning label per observation (global-weighted if
            use_weights, else unweighted)
        aggregated_by_level: Winning label per observation under per-level weights
        prediction_matrix: Individual predictions, shape (n_obs, nclas)
        levels: Canonical level order used for voting
        votes: Tally behind ``aggregated``, shape (n_levels, n_obs)
        level_votes: Tally behind ``aggregated_by_level``, shape (n_levels, n_obs)
        classifier_names: Column names of the prediction matrix
    """
    aggregated: np.ndarray
    aggregated_by_level: np.ndarray
    prediction_matrix: np.ndarray
    levels: List
    votes: np.ndarray
    level_votes: np.ndarray
    classifier_names: List[str]

    @property
    def n_samples(self) -> int:
        return self.prediction_matrix.shape[0]

    def to_frame(self) -> pd.DataFrame:
        """Prediction matrix as a DataFrame, one column per classifier."""
        return pd.DataFrame(self.prediction_matrix, columns=self.classifier_names)


def observed_levels(prediction_matrix: np.ndarray) -> List:
    """Sorted union of all labels in the prediction matrix."""
    return sorted(set(prediction_matrix.ravel().tolist()))


def vote_indicators(prediction_matrix: np.ndarray, levels: List) -> np.ndarray:
    """Boolean votes, shape (n_levels, n_obs, nclas)."""
    if not levels:
        return np.zeros((0,) + prediction_matrix.shape, dtype=np.float64)
    return np.stack([prediction_matrix == level for level in levels]).astype(np.float64)


def count_votes(indicators: np.ndarray) -> np.ndarray:
    """Number of classifiers voting for each level, shape (n_levels, n_obs)."""
    return indicators.sum(axis=2)


def weighted_votes(indicators: np.ndarray, weights: np.ndarray) -> np.ndarray:
    """Sum of global weights of the classifiers voting for each level."""
    return indicators @ np.asarray(weights, dtype=np.float64)


def level_weighted_votes(
    indicators: np.ndarray,
    levels: List,
    level_weights: np.ndarray,
    level_index: dict,
) -> np.ndarray:
    """
    Per-level weighted tally.

    For level j: sum of row j of ``level_weights`` over classifiers voting j,
    divided by the sum of row j. Rows are found by label through
    ``level_index`` (training order). A level unknown at training time, or
    whose row sums to zero, scores 0.
    """
    tally = np.zeros(indicators.shape[:2], dtype=np.float64)
    for j, level in enumerate(levels):
        row_idx = level_index.get(level)
        if row_idx is None:
            continue
        row = level_weights[row_idx]
        total = row.sum()
        if total <= 0.0:
            continue
        tally[j] = (indicators[j] @ row) / total
    return tally


def select_winners(tally: np.ndarray, levels: List) -> np.ndarray:
    """Label with the highest tally per observation; first maximum wins."""
    winners = np.argmax(tally, axis=0)
    return np.array([levels[i] for i in winners], dtype=object)


class EnsemblePredictor:
    """
    Applies a trained ensemble to new observations.

    Example:
        >>> predictor = EnsemblePredictor(model)
        >>> result = predictor.predict(new_df, use_weights=True)
        >>> result.aggregated, result.aggregated_by_level
    """

    def __init__(self, model: EnsembleModel, n_jobs: int = 1) -> None:
        if not isinstance(model, EnsembleModel):
            raise TypeError(f"model must be an EnsembleModel, got {type(model).__name__}")
        if n_jobs < 1:
            raise ValueError(f"n_jobs must be >= 1, got {n_jobs}")
        self._model = model
        self._n_jobs = n_jobs

    @property
    def model(self) -> EnsembleModel:
        return self._model

    def predict(
        self,
        data: pd.DataFrame,
        use_weights: bool = False,
        scaling: Optional[ScalingStats] = None,
    ) -> VotingResult:
        """
        Predict labels for new observations.

        Args:
            data: Frame holding (at least) the model's predictor columns;
                columns are matched by name, extra columns are ignored
            use_weights: Weight ``aggregated`` by the global classifier weights
            scaling: Scaling stats for distance classifiers (None = combine the
                training stats with the stats of this batch)

        Returns:
            VotingResult

        Raises:
            DataError: If predictor columns are missing or unusable, or the
                scaling stats are undefined
        """
        model = self._model
        if not isinstance(data, pd.DataFrame):
            raise DataError(f"Prediction data must be a pandas DataFrame, got {type(data).__name__}")

        X = predictor_matrix(data, model.predictors)
        X_scaled = self._scaled_matrix(X, scaling) if model.nknn > 0 else None

        start = time.perf_counter()
        matrix = self._prediction_matrix(X, X_scaled)
        elapsed_ms = (time.perf_counter() - start) * 1000

        levels = observed_levels(matrix)
        indicators = vote_indicators(matrix, levels)

        if use_weights:
            votes = weighted_votes(indicators, model.weights)
        else:
            votes = count_votes(indicators)
        level_votes = level_weighted_votes(
            indicators, levels, model.level_weights, model.level_index
        )

        if levels:
            aggregated = select_winners(votes, levels)
            aggregated_by_level = select_winners(level_votes, levels)
        else:
            aggregated = np.empty(0, dtype=object)
            aggregated_by_level = np.empty(0, dtype=object)

        logger.debug(
            f"Predicted {len(X)} rows with {model.nclas} classifiers "
            f"(use_weights={use_weights}, levels={levels}, inference_ms={elapsed_ms:.2f})"
        )
        return VotingResult(
            aggregated=aggregated,
            aggregated_by_level=aggregated_by_level,
            prediction_matrix=matrix,
            levels=levels,
            votes=votes,
            level_votes=level_votes,
            classifier_names=model.classifier_names,
        )

    def _scaled_matrix(self, X: np.ndarray, scaling: Optional[ScalingStats]) -> np.ndarray:
        """Scale X with supplied stats or with training stats combined with this batch."""
        model = self._model
        if scaling is None:
            batch = compute_stats(X)
            stats = combine_stats(
                model.scaling.mean, model.scaling.sd, model.n_obs,
                batch.mean, batch.sd, batch.n,
            )
        else:
            if scaling.n_features != len(model.predictors):
                raise DataError(
                    f"Supplied scaling stats cover {scaling.n_features} predictors, "
                    f"model has {len(model.predictors)}"
                )
            stats = scaling
        check_scalable(stats, list(model.predictors))
        return scale(X, stats)

    def _prediction_matrix(self, X: np.ndarray, X_scaled: Optional[np.ndarray]) -> np.ndarray:
        """Fill one column per classifier, in classifier order."""
        model = self._model
        matrix = np.empty((X.shape[0], model.nclas), dtype=object)

        def predict_column(idx: int) -> np.ndarray:
            classifier = model.classifiers[idx]
            source = X_scaled if classifier.family is Family.DISTANCE else X
            return classifier.predict(source)

        if self._n_jobs > 1 and model.nclas > 1:
            n_workers = min(self._n_jobs, model.nclas)
            with ThreadPoolExecutor(max_workers=n_workers) as executor:
                futures = {executor.submit(predict_column, i): i for i in range(model.nclas)}
                for future in as_completed(futures):
                    matrix[:, futures[future]] = future.result()
        else:
            for i in range(model.nclas):
                matrix[:, i] = predict_column(i)
        return matrix


def predict_ensemble(
    model: EnsembleModel,
    data: pd.DataFrame,
    use_weights: bool = False,
    scaling: Optional[ScalingStats] = None,
    n_jobs: int = 1,
) -> VotingResult:
    """Convenience function for EnsemblePredictor(model).predict(...)."""
    return EnsemblePredictor(model, n_jobs=n_jobs).predict(
        data, use_weights=use_weights, scaling=scaling
    )


__all__ = [
    "VotingResult",
    "EnsemblePredictor",
    "predict_ensemble",
    "observed_levels",
    "vote_indicators",
    "count_votes",
    "weighted_votes",
    "level_weighted_votes",
    "select_winners",
]
