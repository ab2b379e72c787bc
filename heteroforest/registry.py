"""
ClassifierRegistry - maps family tags to base classifier implementations.

Each family registers exactly one implementation via the @register
decorator; the ensemble trainer creates classifiers from their spec's
family tag:

    >>> model = ClassifierRegistry.create("distance", config={"n_neighbors": 5})
    >>> ClassifierRegistry.list_all()
    ['discriminant', 'distance', 'tree']
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from .base import BaseClassifier
from .exceptions import UnsupportedOptionError

logger = logging.getLogger(__name__)


class ClassifierRegistry:
    """
    Plugin registry for base classifier families.

    Class Attributes:
        _models: Dict mapping names and aliases to classifier classes
        _metadata: Dict mapping canonical names to metadata dicts
    """

    _models: dict[str, type[BaseClassifier]] = {}
    _metadata: dict[str, dict[str, Any]] = {}

    @classmethod
    def register(
        cls,
        name: str,
        description: str = "",
        aliases: list[str] | None = None,
    ) -> Callable[[type[BaseClassifier]], type[BaseClassifier]]:
        """
        Decorator to register a classifier class under a family name.

        Raises:
            TypeError: If the class is not a BaseClassifier
            ValueError: If the name is already registered
        """
        aliases = aliases or []

        def decorator(model_class: type[BaseClassifier]) -> type[BaseClassifier]:
            if not issubclass(model_class, BaseClassifier):
                raise TypeError(
                    f"Classifier class must be a subclass of BaseClassifier, "
                    f"got {model_class.__name__}"
                )

            if name in cls._models:
                raise ValueError(
                    f"Classifier '{name}' is already registered to "
                    f"{cls._models[name].__name__}"
                )

            cls._models[name] = model_class
            for alias in aliases:
                if alias in cls._models:
                    logger.warning(f"Alias '{alias}' already registered, skipping")
                else:
                    cls._models[alias] = model_class

            cls._metadata[name] = {
                "name": name,
                "description": description,
                "aliases": aliases,
                "class": model_class.__name__,
            }
            logger.debug(f"Registered classifier '{name}' ({model_class.__name__})")
            return model_class

        return decorator

    @classmethod
    def get(cls, name: str) -> type[BaseClassifier]:
        """
        Get a classifier class by family name or alias.

        Raises:
            UnsupportedOptionError: If the name is not registered
        """
        name_lower = str(getattr(name, "value", name)).lower().strip()
        if name_lower not in cls._models:
            available = sorted(cls._models.keys())
            raise UnsupportedOptionError(
                f"Unknown classifier family '{name}'. Available: {available}"
            )
        return cls._models[name_lower]

    @classmethod
    def create(
        cls,
        name: str,
        config: dict[str, Any] | None = None,
    ) -> BaseClassifier:
        """Instantiate a registered classifier."""
        return cls.get(name)(config=config)

    @classmethod
    def list_all(cls) -> list[str]:
        """Sorted canonical names (aliases excluded)."""
        return sorted(cls._metadata.keys())

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return str(getattr(name, "value", name)).lower().strip() in cls._models

    @classmethod
    def get_metadata(cls, name: str) -> dict[str, Any]:
        """Metadata of a registered classifier (aliases resolve to the canonical entry)."""
        model_class = cls.get(name)
        for meta in cls._metadata.values():
            if meta["class"] == model_class.__name__:
                return meta.copy()
        return {"name": name, "description": "", "aliases": [], "class": model_class.__name__}


def register(
    name: str,
    description: str = "",
    aliases: list[str] | None = None,
) -> Callable[[type[BaseClassifier]], type[BaseClassifier]]:
    """Convenience decorator equivalent to ClassifierRegistry.register()."""
    return ClassifierRegistry.register(name=name, description=description, aliases=aliases)


__all__ = [
    "ClassifierRegistry",
    "register",
]
