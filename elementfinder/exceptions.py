"""Exception hierarchy for elementfinder.

All library errors carry a human readable message and an optional
``details`` dictionary with structured context, so callers can log or
serialize them without string parsing.
"""

from typing import Any, Dict, Optional


class ElementFinderError(Exception):
    """Base exception for all elementfinder errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """Initialize the error.

        Args:
            message: Human readable error message
            details: Additional structured context about the error
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the error for logging or API responses."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(ElementFinderError):
    """Raised when search configuration values are invalid."""


class OracleError(ElementFinderError):
    """Raised when a single property fetch fails."""

    def __init__(
        self,
        message: str,
        node_id: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.node_id = node_id
        merged = dict(details or {})
        if node_id is not None:
            merged.setdefault("node_id", node_id)
        super().__init__(message, merged)


class OracleUnavailableError(OracleError):
    """Raised when the host runtime backing the oracle is gone entirely."""


class SearchUnavailableError(ElementFinderError):
    """Raised to callers when a search cannot run at all.

    Distinct from an empty result: absence of matches is reported as
    "no elements found", while this error means the caller may retry.
    """

    def __init__(
        self, message: str = "search unavailable", details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)


__all__ = [
    "ElementFinderError",
    "ConfigurationError",
    "OracleError",
    "OracleUnavailableError",
    "SearchUnavailableError",
]
