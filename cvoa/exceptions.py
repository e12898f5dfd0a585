"""
Exception hierarchy for CVOA.

Only two failure modes surface from the core: a strain built with an invalid
configuration, and a fitness function that fails or returns a non-finite
value. Everything else (bad random draws, empty populations) is part of the
normal search.
"""


class CVOAError(Exception):
    """Base class for all CVOA errors."""


class ConfigurationError(CVOAError, ValueError):
    """Raised when a strain or run is configured with invalid parameters."""


class EvaluationError(CVOAError, RuntimeError):
    """Raised when the fitness function fails for an individual."""

    def __init__(self, message: str, data=None):
        super().__init__(message)
        self.data = data
