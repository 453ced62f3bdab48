__all__ = [
    'ConfigurationError',
    'GenerationError'
]


class ConfigurationError(ValueError):
    """Raised when a user supplied setting is invalid. Always raised before any sampling or file output."""


class GenerationError(RuntimeError):
    """Raised when sampling fails an internal invariant, e.g. a non-permutation assignment or non-finite values."""
