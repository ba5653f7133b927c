"""
Error Handling Utilities

Exception types for the tidepool core and a helper for invoking external
collaborators (sinks, listeners, data sources) without letting their
failures escape into the reporting or recompute loops.
"""

import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)


class TidepoolError(Exception):
    """Base exception for tidepool errors."""


class ConfigError(TidepoolError, ValueError):
    """Raised when configuration is missing, malformed or inconsistent."""


class VocabularyMismatchError(ConfigError):
    """Raised when two interest vectors were built over different vocabularies."""

    def __init__(self, left_length: int, right_length: int):
        self.left_length = left_length
        self.right_length = right_length
        super().__init__(
            f"Interest vector length mismatch: {left_length} != {right_length}. "
            f"Vocabulary and stored vectors are out of sync."
        )


class InvalidCoordinateError(TidepoolError, ValueError):
    """Raised when a coordinate lies outside [-90, 90] x [-180, 180]."""


def safe_execute(func: Callable, *args, default: Any = None, error_context: str = "", **kwargs) -> Any:
    """
    Call ``func(*args, **kwargs)`` on behalf of a loop that must keep going.

    Any exception is logged at ERROR, with the traceback attached only when
    DEBUG is enabled, and ``default`` is returned in place of a result.
    """
    try:
        return func(*args, **kwargs)
    except Exception as e:
        prefix = f"{error_context}: " if error_context else ""
        logger.error(f"{prefix}{type(e).__name__}: {e}", exc_info=logger.isEnabledFor(logging.DEBUG))
        return default
