"""
Exception classes for claude-multi.

Every error raised by the core derives from ClaudeMultiError so the CLI
can report it at the command boundary.
"""

from typing import Any, Dict, Optional


class ClaudeMultiError(Exception):
    """Base exception for all claude-multi errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize ClaudeMultiError.

        Args:
            message: Error message
            error_code: Optional error code for categorization
            details: Optional additional error details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def __str__(self) -> str:
        """String representation of the error."""
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }


class DuplicateNameError(ClaudeMultiError):
    """An instance with the same name is already registered."""

    def __init__(self, name: str):
        super().__init__(
            f"Instance '{name}' already exists",
            details={"name": name},
        )
        self.name = name


class NotFoundError(ClaudeMultiError):
    """Missing instance or missing source configuration."""
    pass


class SourceNotFoundError(NotFoundError):
    """Default configuration directory or its settings file is absent."""
    pass


class ConfigIOError(ClaudeMultiError):
    """Malformed persisted JSON or file-system failure."""
    pass


class ValidationError(ClaudeMultiError):
    """Data validation errors."""
    pass


class VersionCheckError(ClaudeMultiError):
    """npm registry lookups or updates failed."""
    pass
