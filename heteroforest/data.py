"""
Dataset handling for ensemble training and prediction.

Turns a pandas DataFrame into the arrays the ensemble works on:
- the label column becomes an object array plus an ordered list of levels
- predictor columns become a float matrix in a fixed, named order

Label levels follow categorical semantics: a ``pandas.Categorical`` column
keeps its declared categories (including ones with no observations), any
other categorical-like column uses its sorted unique values.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd
from pandas.api import types as ptypes

from .exceptions import DataError


@dataclass(frozen=True)
class TrainingData:
    """
    Validated training arrays.

    Attributes:
        X: Predictor matrix, shape (n_obs, n_predictors)
        y: Labels, shape (n_obs,), object dtype
        levels: Ordered label levels fixed for the lifetime of the model
        predictors: Predictor names in column order of X
    """
    X: np.ndarray
    y: np.ndarray
    levels: List
    predictors: List[str]

    @property
    def n_obs(self) -> int:
        return self.X.shape[0]

    @property
    def n_predictors(self) -> int:
        return self.X.shape[1]


def label_levels(labels: pd.Series) -> List:
    """
    Return the ordered label levels of a label column.

    Raises:
        DataError: If the column is not categorical-like or its values
            cannot be ordered against each other
    """
    if labels.isna().any():
        raise DataError(f"Label column '{labels.name}' contains missing values")
    if isinstance(labels.dtype, pd.CategoricalDtype):
        levels = list(labels.cat.categories)
    elif ptypes.is_float_dtype(labels) or ptypes.is_complex_dtype(labels):
        raise DataError(
            f"Label column '{labels.name}' is numeric ({labels.dtype}), not categorical. "
            f"Convert it with .astype('category') or to strings."
        )
    else:
        levels = labels.unique().tolist()

    # voting orders observed labels with sorted()
    try:
        ordered = sorted(levels)
    except TypeError as e:
        raise DataError(
            f"Label column '{labels.name}' mixes values that cannot be ordered ({e}). "
            f"Convert it to a single type, e.g. with .astype(str)."
        ) from e
    if isinstance(labels.dtype, pd.CategoricalDtype):
        return levels
    return ordered


def resolve_predictors(
    data: pd.DataFrame,
    label: Optional[str],
    predictors: Optional[Sequence[str]] = None,
) -> List[str]:
    """
    Resolve the ordered predictor names.

    When ``predictors`` is None every column except the label is used, in
    frame order.

    Raises:
        DataError: If a requested predictor is missing or no predictors remain
    """
    if predictors is None:
        names = [c for c in data.columns if c != label]
    else:
        names = list(predictors)
        if label is not None and label in names:
            raise DataError(f"Label column '{label}' cannot also be a predictor")
        if len(set(names)) != len(names):
            raise DataError(f"Duplicate predictor names: {names}")

    missing = [n for n in names if n not in data.columns]
    if missing:
        raise DataError(
            f"Predictor columns not found in data: {missing}. "
            f"Available columns: {list(data.columns)}"
        )
    if not names:
        raise DataError("No predictor columns available")
    return names


def predictor_matrix(data: pd.DataFrame, predictors: Sequence[str]) -> np.ndarray:
    """
    Extract predictors by name, in the given order, as a float matrix.

    Raises:
        DataError: If a column is missing, duplicated, non-numeric or holds NaN/inf
    """
    missing = [p for p in predictors if p not in data.columns]
    if missing:
        raise DataError(
            f"Data is missing predictor columns {missing}; "
            f"expected {list(predictors)}"
        )
    duplicated = sorted(
        set(data.columns[data.columns.duplicated()]) & set(predictors), key=str
    )
    if duplicated:
        raise DataError(f"Data has duplicated predictor columns: {duplicated}")

    frame = data.loc[:, list(predictors)]
    non_numeric = [
        c for c in frame.columns
        if not ptypes.is_numeric_dtype(frame[c]) or ptypes.is_bool_dtype(frame[c])
    ]
    if non_numeric:
        raise DataError(f"Predictor columns must be numeric: {non_numeric}")

    X = frame.to_numpy(dtype=np.float64)
    if not np.isfinite(X).all():
        bad = [c for c, ok in zip(frame.columns, np.isfinite(X).all(axis=0)) if not ok]
        raise DataError(f"Predictor columns contain NaN or infinite values: {bad}")
    return X


def prepare_training_data(
    data: pd.DataFrame,
    label: str,
    predictors: Optional[Sequence[str]] = None,
) -> TrainingData:
    """
    Validate a training frame and split it into predictor and label arrays.

    Raises:
        DataError: On empty data, a missing or non-categorical label, a label
            with fewer than two levels, or unusable predictors
    """
    if not isinstance(data, pd.DataFrame):
        raise DataError(f"Training data must be a pandas DataFrame, got {type(data).__name__}")
    if len(data) == 0:
        raise DataError("Training data is empty")
    if label not in data.columns:
        raise DataError(f"Label column '{label}' not found in data")

    labels = data[label]
    levels = label_levels(labels)
    if len(levels) < 2:
        raise DataError(
            f"Label column '{label}' must have at least 2 levels, got {levels}"
        )

    names = resolve_predictors(data, label, predictors)
    X = predictor_matrix(data, names)
    y = np.asarray(labels.astype(object), dtype=object)
    return TrainingData(X=X, y=y, levels=levels, predictors=names)


__all__ = [
    "TrainingData",
    "label_levels",
    "resolve_predictors",
    "predictor_matrix",
    "prepare_training_data",
]
