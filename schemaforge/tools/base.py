"""Tool base class and result types."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional
from pathlib import Path

from schemaforge.core.errors import ClassifiedError, ErrorCategory


@dataclass
class ToolResult:
    """Result from tool execution.

    Attributes:
        success: Whether the tool executed successfully
        output: Tool output (empty string on failure)
        error: Error message if failed
        metadata: Additional metadata (counts, output path, etc.)
        error_category: Classification of error type
        suggestion: Actionable suggestion for fixing the error
    """

    success: bool
    output: str
    error: Optional[str] = None
    metadata: dict = field(default_factory=dict)
    error_category: Optional[ErrorCategory] = None
    suggestion: Optional[str] = None

    @classmethod
    def failure(cls, error: str, **kwargs) -> "ToolResult":
        return cls(success=False, output="", error=error, **kwargs)

    @classmethod
    def from_error(cls, classified: ClassifiedError) -> "ToolResult":
        return cls(
            success=False,
            output="",
            error=classified.message,
            error_category=classified.category,
            suggestion=classified.suggestion,
        )


class Tool(ABC):
    """Base class for all tools."""

    name: str
    description: str
    parameters: dict  # JSON Schema

    def __init__(self, work_dir: Optional[Path] = None):
        """Initialize tool with optional working directory.

        Args:
            work_dir: Working directory for file operations. None = current directory.
        """
        self.work_dir = work_dir

    @abstractmethod
    async def execute(self, **kwargs) -> ToolResult:
        """Execute the tool."""
        pass

    def get_schema(self) -> dict:
        """Get a function-calling tool schema."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }

    def _resolve_path(self, path: str) -> Path:
        """Resolve a path relative to work_dir if set and path is relative."""
        file_path = Path(path).expanduser()

        if file_path.is_absolute():
            return file_path.resolve()

        if self.work_dir:
            return (self.work_dir / file_path).resolve()

        return file_path.resolve()
