"""
Heterogeneous ensemble training and prediction.

- EnsembleTrainer: bootstrap training, OOB scoring and weighting
- EnsembleModel: immutable trained ensemble (save/load with joblib)
- EnsemblePredictor: weighted and per-level weighted voting
"""
from .model import ClassifierRecord, EnsembleBuilder, EnsembleModel
from .predictor import EnsemblePredictor, VotingResult, predict_ensemble
from .trainer import EnsembleTrainer, train_ensemble

__all__ = [
    "ClassifierRecord",
    "EnsembleBuilder",
    "EnsembleModel",
    "EnsemblePredictor",
    "VotingResult",
    "predict_ensemble",
    "EnsembleTrainer",
    "train_ensemble",
]
