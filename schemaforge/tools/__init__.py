"""Agent-facing schema tools."""

from schemaforge.tools.base import Tool, ToolResult
from schemaforge.tools.schema import GenerateERDiagramTool, ParseSchemaTool, default_tools

__all__ = [
    "Tool",
    "ToolResult",
    "GenerateERDiagramTool",
    "ParseSchemaTool",
    "default_tools",
]
