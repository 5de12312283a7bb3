"""Shared error handling."""

from schemaforge.core.errors import (
    ClassifiedError,
    ConfigError,
    ErrorCategory,
    SchemaForgeError,
    classify_error,
)

__all__ = [
    "ClassifiedError",
    "ConfigError",
    "ErrorCategory",
    "SchemaForgeError",
    "classify_error",
]
