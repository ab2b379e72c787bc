"""
EnsembleTrainer - trains a heterogeneous ensemble from a DataFrame.

Training runs in three phases:

1. Validation: configuration and data are checked up front; any problem
   raises ConfigError / DataError before a single classifier is trained.
2. Slot training: ``ntree`` trees, then ``nlda`` discriminant classifiers,
   then ``nknn`` distance classifiers, each on its own bootstrap resample,
   each evaluated on its out-of-bag rows.
3. Assembly: once every slot is trained, errors are floored across the
   whole ensemble, converted to weights and frozen into an EnsembleModel.

Each slot draws from its own random stream spawned from the configured
seed, so results do not depend on ``n_jobs`` or on completion order.

Example:
    config = EnsembleConfig(nclas=30, ntree=10, nknn=10, random_state=42)
    model = EnsembleTrainer(config).fit(train_df, label="species")
"""
from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from ..bootstrap import train_base_classifier
from ..config import EnsembleConfig
from ..data import TrainingData, prepare_training_data
from ..exceptions import DataError
from ..oob import level_oob_errors, oob_error
from ..scaling import ScalingStats, check_scalable, compute_stats, scale
from ..specs import ClassifierSpec, Family, build_specs
from .model import ClassifierRecord, EnsembleBuilder, EnsembleModel

logger = logging.getLogger(__name__)


class EnsembleTrainer:
    """
    Trains an EnsembleModel according to an EnsembleConfig.

    Example:
        >>> trainer = EnsembleTrainer(EnsembleConfig(nclas=9, ntree=3, nknn=3, random_state=1))
        >>> model = trainer.fit(df, label="y")
        >>> model.nclas
        9
    """

    def __init__(self, config: EnsembleConfig) -> None:
        if not isinstance(config, EnsembleConfig):
            raise TypeError(f"config must be an EnsembleConfig, got {type(config).__name__}")
        self._config = config

    @property
    def config(self) -> EnsembleConfig:
        return self._config

    def fit(
        self,
        data: pd.DataFrame,
        label: str,
        predictors: Optional[Sequence[str]] = None,
        scaling: Optional[ScalingStats] = None,
    ) -> EnsembleModel:
        """
        Train the ensemble.

        Args:
            data: Training frame with the label and predictor columns
            label: Name of the categorical label column
            predictors: Predictor names (None = every column except the label)
            scaling: Externally supplied scaling stats (None = computed from data)

        Returns:
            Trained, immutable EnsembleModel

        Raises:
            ConfigError: If counts or subset sizes are inconsistent with the data
            DataError: If the data is unusable (see prepare_training_data)
        """
        start_time = time.time()
        train = prepare_training_data(data, label, predictors)
        config = self._config.resolve(train.n_predictors)
        stats, X_scaled = self._prepare_scaling(train, config, scaling)
        specs = build_specs(
            ntree=config.ntree,
            nlda=config.nlda,
            nknn=config.nknn,
            mtr=config.mtr,
            mlda=config.mlda,
            mknn=config.mknn,
            kknn=config.kknn,
        )

        logger.info(
            f"Training heterogeneous ensemble: nclas={config.nclas} "
            f"(tree={config.ntree}, discriminant={config.nlda}, distance={config.nknn}), "
            f"n_obs={train.n_obs}, n_predictors={train.n_predictors}, levels={train.levels}"
        )

        builder = EnsembleBuilder(specs, train.levels, train.n_obs)
        rngs = [
            np.random.default_rng(seq)
            for seq in np.random.SeedSequence(config.random_state).spawn(len(specs))
        ]

        def train_slot(slot: int) -> ClassifierRecord:
            return self._train_slot(specs[slot], train, X_scaled, rngs[slot])

        if config.n_jobs > 1 and len(specs) > 1:
            n_workers = min(config.n_jobs, len(specs))
            with ThreadPoolExecutor(max_workers=n_workers) as executor:
                futures = {executor.submit(train_slot, i): i for i in range(len(specs))}
                for future in as_completed(futures):
                    builder.add(futures[future], future.result())
        else:
            for i in range(len(specs)):
                builder.add(i, train_slot(i))

        model = builder.build(
            weighting=config.weighting,
            scaling=stats,
            predictors=train.predictors,
            metadata={"config": config.to_dict(), "label": label},
        )

        training_time = time.time() - start_time
        logger.info(
            f"Ensemble training complete: mean_oob_error={float(model.errors.mean()):.4f}, "
            f"time={training_time:.1f}s"
        )
        return model

    def _prepare_scaling(
        self,
        train: TrainingData,
        config: EnsembleConfig,
        scaling: Optional[ScalingStats],
    ) -> tuple[ScalingStats, Optional[np.ndarray]]:
        """Resolve scaling stats and the scaled matrix (only built when distance classifiers exist)."""
        if scaling is None:
            stats = compute_stats(train.X, names=train.predictors)
        else:
            if scaling.n_features != train.n_predictors:
                raise DataError(
                    f"Supplied scaling stats cover {scaling.n_features} predictors, "
                    f"data has {train.n_predictors}"
                )
            stats = ScalingStats(
                mean=scaling.mean,
                sd=scaling.sd,
                n=train.n_obs,
                names=train.predictors,
            )

        if config.nknn == 0:
            return stats, None

        if config.kknn > train.n_obs:
            raise DataError(
                f"kknn ({config.kknn}) exceeds the number of training rows ({train.n_obs})"
            )
        check_scalable(stats, train.predictors)
        return stats, scale(train.X, stats)

    def _train_slot(
        self,
        spec: ClassifierSpec,
        train: TrainingData,
        X_scaled: Optional[np.ndarray],
        rng: np.random.Generator,
    ) -> ClassifierRecord:
        """Train one classifier and score it on its out-of-bag rows."""
        fit = train_base_classifier(spec, train.X, train.y, rng, X_scaled=X_scaled)

        source = X_scaled if spec.family is Family.DISTANCE else train.X
        truth = train.y[fit.oob_rows]
        if fit.n_oob == 0:
            logger.warning(
                f"{spec.family.value} classifier has no out-of-bag rows; "
                f"its OOB error is taken as 0"
            )
            predicted = np.empty(0, dtype=object)
        else:
            predicted = fit.classifier.predict(source[fit.oob_rows])

        return ClassifierRecord(
            classifier=fit.classifier,
            error=oob_error(predicted, truth),
            level_errors=level_oob_errors(predicted, truth, train.levels),
            n_oob=fit.n_oob,
        )


def train_ensemble(
    data: pd.DataFrame,
    label: str,
    config: EnsembleConfig,
    predictors: Optional[Sequence[str]] = None,
    scaling: Optional[ScalingStats] = None,
) -> EnsembleModel:
    """
    Convenience function to train an ensemble in one call.

    Example:
        >>> model = train_ensemble(df, "y", EnsembleConfig(nclas=10, random_state=0))
    """
    return EnsembleTrainer(config).fit(data, label, predictors=predictors, scaling=scaling)


__all__ = [
    "EnsembleTrainer",
    "train_ensemble",
]
