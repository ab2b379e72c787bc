"""
heteroforest - heterogeneous bagged ensembles of trees, LDA and kNN.

Quick Start:
-----------
    from heteroforest import EnsembleConfig, train_ensemble, predict_ensemble

    config = EnsembleConfig(nclas=30, ntree=10, nknn=10, weighting="boost", random_state=42)
    model = train_ensemble(train_df, label="species", config=config)

    result = predict_ensemble(model, test_df, use_weights=True)
    result.aggregated            # global-weighted vote
    result.aggregated_by_level   # per-level weighted vote
    result.to_frame()            # individual classifier predictions

Architecture:
------------
    BaseClassifier: Abstract interface for ensemble members
    ClassifierRegistry: Plugin system mapping family names to classifiers
    EnsembleTrainer: Bootstrap training, OOB errors and weights
    EnsemblePredictor: Voting over the trained classifiers
"""
from __future__ import annotations

from .base import BaseClassifier
from .registry import ClassifierRegistry, register

from .config import (
    DEFAULT_NEIGHBOR_COUNT,
    EnsembleConfig,
    load_config,
    save_config,
)

from .exceptions import (
    ConfigError,
    ConfigValidationError,
    DataError,
    HeteroForestError,
    NumericError,
    UnsupportedOptionError,
)

from .scaling import ScalingStats, combine_stats, compute_stats
from .specs import Family
from .weights import WeightingFormula, compute_weights

from .ensemble import (
    EnsembleModel,
    EnsemblePredictor,
    EnsembleTrainer,
    VotingResult,
    predict_ensemble,
    train_ensemble,
)

# Auto-import classifier implementations to trigger registration
from . import classifiers  # tree, discriminant, distance

# Version
__version__ = "0.1.0"


# Public API
__all__ = [
    "__version__",
    # Base classes
    "BaseClassifier",
    "Family",
    # Registry
    "ClassifierRegistry",
    "register",
    # Configuration
    "DEFAULT_NEIGHBOR_COUNT",
    "EnsembleConfig",
    "load_config",
    "save_config",
    "WeightingFormula",
    # Errors
    "HeteroForestError",
    "ConfigError",
    "ConfigValidationError",
    "UnsupportedOptionError",
    "DataError",
    "NumericError",
    # Scaling
    "ScalingStats",
    "compute_stats",
    "combine_stats",
    # Weights
    "compute_weights",
    # Training and prediction
    "EnsembleModel",
    "EnsembleTrainer",
    "EnsemblePredictor",
    "VotingResult",
    "train_ensemble",
    "predict_ensemble",
]
