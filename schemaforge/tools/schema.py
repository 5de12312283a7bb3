"""Schema tools: parse DDL and draw ER diagrams from it.

These are the functions a chat model (or any agent loop) calls on generated
SQL. Bad SQL never fails a tool; only missing inputs and IO problems do.
"""

from pathlib import Path
from typing import Optional
import structlog

from schemaforge.core.errors import classify_error
from schemaforge.diagrams import DiagramFormat, LayoutOptions, render
from schemaforge.llm.response import SqlResponseParser
from schemaforge.parser import ParsedSchema, SchemaExtractor
from schemaforge.tools.base import Tool, ToolResult

log = structlog.get_logger()

_SOURCE_PROPERTIES = {
    "sql": {
        "type": "string",
        "description": "SQL text with CREATE TABLE statements",
    },
    "sql_file": {
        "type": "string",
        "description": "Path to a SQL file with CREATE TABLE statements",
    },
    "response": {
        "type": "string",
        "description": "Raw model response; SQL is pulled from tool calls or ```sql blocks",
    },
}


class _SchemaSourceTool(Tool):
    """Shared input handling for tools that start from DDL text."""

    def __init__(
        self,
        work_dir: Optional[Path] = None,
        extractor: Optional[SchemaExtractor] = None,
        response_parser: Optional[SqlResponseParser] = None,
    ):
        super().__init__(work_dir)
        self.extractor = extractor or SchemaExtractor()
        self.response_parser = response_parser or SqlResponseParser()

    def _load_schema(
        self,
        sql: Optional[str],
        sql_file: Optional[str],
        response: Optional[str],
    ) -> tuple[Optional[ParsedSchema], Optional[ToolResult]]:
        """Return (schema, None) or (None, failure result)."""
        if sql is not None:
            text = sql
        elif sql_file:
            resolved = self._resolve_path(sql_file)
            if not resolved.exists():
                return None, ToolResult.failure(f"SQL file not found: {resolved}")
            try:
                text = resolved.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                log.error("sql_file_read_failed", path=str(resolved), error=str(e))
                return None, ToolResult.from_error(classify_error(e, f"Cannot read {resolved}"))
        elif response is not None:
            text = self.response_parser.extract(response)
            if text is None:
                return None, ToolResult.failure(
                    "No SQL found in model response",
                    suggestion="Ask the model for CREATE TABLE statements in a ```sql block",
                )
        else:
            return None, ToolResult.failure("Provide one of: sql, sql_file, response")

        return self.extractor.parse(text), None


class ParseSchemaTool(_SchemaSourceTool):
    """Parse CREATE TABLE statements into tables, columns and relations."""

    name = "parse_schema"
    description = """Parse SQL CREATE TABLE statements into a structured schema.

Returns JSON with tables (columns with primary/foreign key flags) and
foreign-key relations. Unparseable statements are skipped, never an error.

Examples:
- parse_schema(sql="CREATE TABLE users (\\n  id INTEGER PRIMARY KEY\\n);")
- parse_schema(sql_file="schema.sql")"""

    parameters = {
        "type": "object",
        "properties": dict(_SOURCE_PROPERTIES),
        "required": [],
    }

    async def execute(
        self,
        sql: Optional[str] = None,
        sql_file: Optional[str] = None,
        response: Optional[str] = None,
        **kwargs,
    ) -> ToolResult:
        """Parse the schema and return it as JSON."""
        schema, failure = self._load_schema(sql, sql_file, response)
        if failure:
            return failure

        metadata = {
            "tables_count": len(schema.tables),
            "relations_count": len(schema.relations),
            "empty": schema.is_empty,
        }
        if schema.is_empty:
            metadata["note"] = "No tables found"

        log.info("schema_tool_parsed", tables=len(schema.tables), relations=len(schema.relations))
        return ToolResult(success=True, output=schema.to_json(), metadata=metadata)


class GenerateERDiagramTool(_SchemaSourceTool):
    """Generate Entity-Relationship diagrams from CREATE TABLE statements."""

    name = "generate_er_diagram"
    description = """Generate an Entity-Relationship diagram from SQL DDL.

Supports Mermaid, PlantUML, D2 and SVG output.

Examples:
- generate_er_diagram(sql_file="schema.sql") - Mermaid from a file
- generate_er_diagram(sql="CREATE TABLE ...;", format="d2")
- generate_er_diagram(sql_file="schema.sql", format="svg", output_file="erd.svg")"""

    parameters = {
        "type": "object",
        "properties": {
            **_SOURCE_PROPERTIES,
            "format": {
                "type": "string",
                "description": "Output format: mermaid, plantuml, d2, svg",
                "enum": [f.value for f in DiagramFormat],
            },
            "show_types": {
                "type": "boolean",
                "description": "Show column types (default: true)",
            },
            "title": {
                "type": "string",
                "description": "Diagram title",
            },
            "output_file": {
                "type": "string",
                "description": "Optional file path to save the diagram",
            },
        },
        "required": [],
    }

    def __init__(self, work_dir: Optional[Path] = None, layout: Optional[LayoutOptions] = None, **kwargs):
        super().__init__(work_dir, **kwargs)
        self.layout = layout

    async def execute(
        self,
        sql: Optional[str] = None,
        sql_file: Optional[str] = None,
        response: Optional[str] = None,
        format: str = "mermaid",
        show_types: bool = True,
        title: Optional[str] = None,
        output_file: Optional[str] = None,
        **kwargs,
    ) -> ToolResult:
        """Generate the ER diagram."""
        schema, failure = self._load_schema(sql, sql_file, response)
        if failure:
            return failure

        if schema.is_empty:
            return ToolResult.failure(
                "No tables found",
                suggestion="Each table needs the shape: CREATE TABLE name ( ... );",
            )

        try:
            diagram = render(schema, format, show_types=show_types, title=title, layout=self.layout)
        except ValueError as e:
            return ToolResult.from_error(classify_error(e))

        fmt = DiagramFormat(format).value
        metadata = {
            "format": fmt,
            "tables_count": len(schema.tables),
            "relations_count": len(schema.relations),
        }

        if output_file:
            output_path = self._resolve_path(output_file)
            try:
                output_path.parent.mkdir(parents=True, exist_ok=True)
                output_path.write_text(diagram, encoding="utf-8")
            except OSError as e:
                log.error("er_diagram_write_failed", path=str(output_path), error=str(e))
                return ToolResult.from_error(classify_error(e, f"Cannot write {output_path}"))
            metadata["output_file"] = str(output_path)
            return ToolResult(
                success=True,
                output=f"Diagram saved to {output_path}\n\n```{fmt}\n{diagram}\n```",
                metadata=metadata,
            )

        return ToolResult(success=True, output=f"```{fmt}\n{diagram}\n```", metadata=metadata)


def default_tools(work_dir: Optional[Path] = None, layout: Optional[LayoutOptions] = None) -> list[Tool]:
    """The schema tools, ready to hand to an agent loop."""
    return [
        ParseSchemaTool(work_dir=work_dir),
        GenerateERDiagramTool(work_dir=work_dir, layout=layout),
    ]
