"""
Custom exceptions for graphweaver.

This module defines all custom exceptions used throughout the application.
Only validation failures are retried inside the pipeline; every exception
defined here surfaces to the caller.
"""

from typing import Any, Optional


class GraphweaverException(Exception):
    """Base exception for all graphweaver-specific errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            details: Optional dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# Generation Exceptions
# =============================================================================


class GenerationExhaustedError(GraphweaverException):
    """No valid draft was produced within the attempt budget."""

    def __init__(
        self,
        attempts: int,
        last_error: str,
        last_draft: Optional[Any] = None,
    ) -> None:
        """Initialize with the final attempt's error and draft."""
        message = f"Failed to generate a valid graph after {attempts} attempts"
        super().__init__(message, {"attempts": attempts, "last_error": last_error})
        self.attempts = attempts
        self.last_error = last_error
        self.last_draft = last_draft


# =============================================================================
# Resolution Exceptions
# =============================================================================


class NoCandidateError(GraphweaverException):
    """Disambiguation had no hits and no identifier minting configured."""

    def __init__(self, text: str) -> None:
        """Initialize with the query text that produced no candidates."""
        message = f"No search hits available for disambiguation of '{text}'"
        super().__init__(message, {"text": text})
        self.text = text


class UnresolvedPlaceholderError(GraphweaverException):
    """A draft references a placeholder with no resolved subject."""

    def __init__(self, placeholder: str) -> None:
        """Initialize with the missing placeholder token."""
        message = f"Variable {placeholder} not found"
        super().__init__(message, {"placeholder": placeholder})
        self.placeholder = placeholder


class MalformedPlaceholderError(UnresolvedPlaceholderError):
    """A placeholder token is embedded in a larger IRI or prefixed name."""

    def __init__(self, placeholder: str, fragment: str) -> None:
        GraphweaverException.__init__(
            self,
            f"Placeholder {placeholder} must be a whole IRI, found in '{fragment}'",
            {"placeholder": placeholder, "fragment": fragment},
        )
        self.placeholder = placeholder
        self.fragment = fragment


# =============================================================================
# Collaborator Exceptions
# =============================================================================


class CollaboratorError(GraphweaverException):
    """Transport or service failure from an external collaborator."""

    pass


class GenerationError(CollaboratorError):
    """Language-model request failed or returned an unusable payload."""

    pass


class ValidatorError(CollaboratorError):
    """The validator itself failed, independent of the draft under test."""

    pass


class SearchError(CollaboratorError):
    """Candidate search failed."""

    pass


class StoreError(CollaboratorError):
    """Reading or writing the knowledge store failed."""

    pass


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigurationError(GraphweaverException):
    """Configuration error."""

    pass


class MissingConfigurationError(ConfigurationError):
    """Required configuration missing."""

    def __init__(self, config_name: str) -> None:
        """Initialize with config name."""
        message = f"Required configuration '{config_name}' is missing"
        super().__init__(message, {"config_name": config_name})
