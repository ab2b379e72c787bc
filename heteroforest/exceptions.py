"""Exception taxonomy for ensemble training and prediction."""
from typing import List


class HeteroForestError(Exception):
    """Base class for all heteroforest errors."""
    pass


class ConfigError(HeteroForestError):
    """Raised when configuration loading, parsing or consistency checks fail."""
    pass


class ConfigValidationError(ConfigError):
    """Raised when configuration validation fails."""
    def __init__(self, errors: List[str]) -> None:
        self.errors = errors
        super().__init__(f"Configuration validation failed: {errors}")


class UnsupportedOptionError(ConfigError):
    """Raised when an option name (weighting formula, family) is not recognised."""
    pass


class DataError(HeteroForestError):
    """Raised when the training or prediction data cannot be used as given."""
    pass


class NumericError(HeteroForestError):
    """Raised when an error rate outside (0, 1] reaches a weighting formula."""
    pass
