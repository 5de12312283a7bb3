"""Error classification for schemaforge.

The parser never raises; failures only happen at the edges where files are
read, configuration is loaded or diagrams are written. Those errors are
classified here so tools and the CLI report them the same way.
"""

import errno
from dataclasses import dataclass
from enum import Enum
from typing import Optional
import structlog

log = structlog.get_logger()


class SchemaForgeError(Exception):
    """Base exception for schemaforge."""


class ConfigError(SchemaForgeError):
    """Configuration file could not be loaded or saved."""


class ErrorCategory(Enum):
    """Categories of errors for handling decisions."""

    INPUT = "input"           # Bad arguments, undecodable text, invalid config
    FATAL = "fatal"           # Permissions, missing files
    TRANSIENT = "transient"   # Interrupted or busy IO


@dataclass
class ClassifiedError:
    """A classified error with handling metadata."""

    category: ErrorCategory
    message: str
    suggestion: Optional[str] = None
    original_exception: Optional[Exception] = None

    @property
    def retryable(self) -> bool:
        return self.category == ErrorCategory.TRANSIENT

    def __str__(self) -> str:
        parts = [self.message]
        if self.suggestion:
            parts.append(f"Suggestion: {self.suggestion}")
        return " | ".join(parts)


TRANSIENT_ERRNO = {
    errno.EAGAIN,
    errno.EWOULDBLOCK,
    errno.EINTR,
    errno.EBUSY,
}

ERROR_SUGGESTIONS = {
    "file not found": "Check the path, or pass '-' to read from stdin",
    "no such file": "Check the path, or pass '-' to read from stdin",
    "permission denied": "Check file permissions or try a different location",
    "is a directory": "Expected a file path, not a directory",
    "not a directory": "Expected a directory path, not a file",
    "codec can't decode": "Save the file as UTF-8 text",
    "no space left": "Free up disk space on the device",
    "is not a valid diagramformat": "Use one of: mermaid, plantuml, d2, svg",
    "validation error": "Fix the reported fields in the config file",
}


def classify_error(error: Exception, context: str = "") -> ClassifiedError:
    """Classify an exception for reporting.

    Args:
        error: The exception to classify
        context: Optional context about where the error occurred

    Returns:
        ClassifiedError with category and suggestion
    """
    error_msg = str(error).lower()
    message = f"{context}: {error}" if context else str(error)

    if isinstance(error, PermissionError):
        category = ErrorCategory.FATAL
        suggestion = "Check file permissions or try a different location"
    elif isinstance(error, FileNotFoundError):
        category = ErrorCategory.FATAL
        suggestion = ERROR_SUGGESTIONS["file not found"]
    elif isinstance(error, IsADirectoryError):
        category = ErrorCategory.FATAL
        suggestion = ERROR_SUGGESTIONS["is a directory"]
    elif isinstance(error, OSError) and error.errno in TRANSIENT_ERRNO:
        category = ErrorCategory.TRANSIENT
        suggestion = "Temporary IO failure - try again"
    elif isinstance(error, (UnicodeDecodeError, ValueError, ConfigError)):
        # pydantic's ValidationError is a ValueError subclass
        category = ErrorCategory.INPUT
        suggestion = _get_suggestion(error_msg)
    else:
        category = ErrorCategory.FATAL
        suggestion = _get_suggestion(error_msg)

    log.debug("error_classified", category=category.value, error_type=type(error).__name__)
    return ClassifiedError(
        category=category,
        message=message,
        suggestion=suggestion,
        original_exception=error,
    )


def _get_suggestion(error_msg: str) -> Optional[str]:
    """Get a suggestion for a lowercase error message."""
    for pattern, suggestion in ERROR_SUGGESTIONS.items():
        if pattern in error_msg:
            return suggestion
    return None
