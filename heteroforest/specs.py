"""
Classifier specifications - how one base classifier is trained.

Each ensemble slot is described by one of three frozen specs. The spec
carries the family tag and the family-specific hyperparameters:

    TreeSpec(subset_size)                        predictors tried per split
    DiscriminantSpec(subset_size)                predictors per classifier
    DistanceSpec(subset_size, neighbor_count)    predictors per classifier, k
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Dict, List, Union


class Family(str, Enum):
    """Base classifier families, in ensemble block order."""

    TREE = "tree"
    DISCRIMINANT = "discriminant"
    DISTANCE = "distance"


@dataclass(frozen=True)
class TreeSpec:
    """Randomised decision tree grown on all predictors of a bootstrap resample."""
    subset_size: int
    family: ClassVar[Family] = Family.TREE

    def model_config(self) -> Dict[str, Any]:
        return {"max_features": self.subset_size}


@dataclass(frozen=True)
class DiscriminantSpec:
    """Linear discriminant classifier on a random predictor subset."""
    subset_size: int
    family: ClassVar[Family] = Family.DISCRIMINANT

    def model_config(self) -> Dict[str, Any]:
        return {}


@dataclass(frozen=True)
class DistanceSpec:
    """k-nearest-neighbor classifier on a random subset of scaled predictors."""
    subset_size: int
    neighbor_count: int
    family: ClassVar[Family] = Family.DISTANCE

    def model_config(self) -> Dict[str, Any]:
        return {"n_neighbors": self.neighbor_count}


ClassifierSpec = Union[TreeSpec, DiscriminantSpec, DistanceSpec]


def build_specs(
    ntree: int,
    nlda: int,
    nknn: int,
    mtr: int,
    mlda: int,
    mknn: int,
    kknn: int,
) -> List[ClassifierSpec]:
    """Expand family counts into the ordered list of slot specs (tree, discriminant, distance)."""
    return (
        [TreeSpec(mtr)] * ntree
        + [DiscriminantSpec(mlda)] * nlda
        + [DistanceSpec(mknn, kknn)] * nknn
    )


__all__ = [
    "Family",
    "TreeSpec",
    "DiscriminantSpec",
    "DistanceSpec",
    "ClassifierSpec",
    "build_specs",
]
