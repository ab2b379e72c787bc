"""
Base classifier families.

- TreeClassifier: randomised decision tree (family "tree")
- DiscriminantClassifier: linear discriminant analysis (family "discriminant")
- DistanceClassifier: k-nearest-neighbor (family "distance")

All classifiers auto-register with ClassifierRegistry on import.
"""

from .discriminant import DiscriminantClassifier
from .distance import DistanceClassifier
from .tree import TreeClassifier

__all__ = [
    "TreeClassifier",
    "DiscriminantClassifier",
    "DistanceClassifier",
]
