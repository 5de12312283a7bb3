"""ER diagram renderers for parsed schemas.

Text-based output for Mermaid, PlantUML and D2, plus a standalone SVG drawn
from the grid layout. No external tools are needed to produce any of them.
"""

import re
from enum import Enum
from html import escape
from typing import Optional

import structlog

from schemaforge.diagrams.layout import LayoutOptions, layout_schema
from schemaforge.parser import Column, ParsedSchema

log = structlog.get_logger()


class DiagramFormat(str, Enum):
    """Supported diagram output formats."""

    MERMAID = "mermaid"
    PLANTUML = "plantuml"
    D2 = "d2"
    SVG = "svg"


_NON_WORD = re.compile(r"[^A-Za-z0-9_]+")
_NON_MERMAID_TYPE = re.compile(r"[^A-Za-z0-9_()\[\]-]+")


def _identifier(name: str) -> str:
    """Reduce a table or column name to word characters."""
    cleaned = _NON_WORD.sub("_", name).strip("_")
    return cleaned or "unnamed"


def _mermaid_label(text: str) -> str:
    """Drop double quotes, which cannot appear inside a quoted Mermaid label."""
    return text.replace('"', '')


def _type_label(column: Column) -> str:
    return column.type or "unknown"


def _key_markers(column: Column) -> list[str]:
    markers = []
    if column.is_primary_key:
        markers.append("PK")
    if column.is_foreign_key:
        markers.append("FK")
    return markers


def render_mermaid(schema: ParsedSchema, show_types: bool = True, title: Optional[str] = None) -> str:
    """Convert a schema to a Mermaid ``erDiagram``."""
    lines = []
    if title:
        lines.append(f"---\ntitle: {title}\n---")
    lines.append("erDiagram")

    for table in schema.tables:
        lines.append(f"    {_identifier(table.name)} {{")
        for column in table.columns:
            col_type = _NON_MERMAID_TYPE.sub("_", _type_label(column)) if show_types else "string"
            keys = _key_markers(column)
            suffix = f" {', '.join(keys)}" if keys else ""
            lines.append(f"        {col_type} {_identifier(column.name)}{suffix}")
        lines.append("    }")

    for rel in schema.relations:
        lines.append(
            f"    {_identifier(rel.to_table)} ||--o{{ {_identifier(rel.from_table)} "
            f": \"{_mermaid_label(rel.from_column)}\""
        )

    return "\n".join(lines)


def render_plantuml(schema: ParsedSchema, show_types: bool = True, title: Optional[str] = None) -> str:
    """Convert a schema to a PlantUML entity diagram."""
    lines = ["@startuml"]
    if title:
        lines.append(f"title {title}")

    for table in schema.tables:
        lines.append(f"entity {_identifier(table.name)} {{")
        for column in table.columns:
            markers = "".join(f" <<{key}>>" for key in _key_markers(column))
            if show_types:
                lines.append(f"    {column.name}: {_type_label(column)}{markers}")
            else:
                lines.append(f"    {column.name}{markers}")
        lines.append("}")

    for rel in schema.relations:
        lines.append(f"{_identifier(rel.to_table)} ||--o{{ {_identifier(rel.from_table)} : {rel.from_column}")

    lines.append("@enduml")
    return "\n".join(lines)


def render_d2(schema: ParsedSchema, show_types: bool = True, title: Optional[str] = None) -> str:
    """Convert a schema to D2 ``sql_table`` shapes."""
    lines = []
    if title:
        lines.append(f"title: {title}")
        lines.append("")

    for table in schema.tables:
        lines.append(f"{_identifier(table.name)}: {{")
        lines.append("    shape: sql_table")
        for column in table.columns:
            constraints = []
            if column.is_primary_key:
                constraints.append("primary_key")
            if column.is_foreign_key:
                constraints.append("foreign_key")
            label = _type_label(column) if show_types else ""
            if len(constraints) == 1:
                label += f" {{constraint: {constraints[0]}}}"
            elif constraints:
                label += f" {{constraint: [{'; '.join(constraints)}]}}"
            label = label.strip()
            if label:
                lines.append(f"    {_identifier(column.name)}: {label}")
            else:
                lines.append(f"    {_identifier(column.name)}")
        lines.append("}")
        lines.append("")

    for rel in schema.relations:
        lines.append(
            f"{_identifier(rel.from_table)}.{_identifier(rel.from_column)} -> "
            f"{_identifier(rel.to_table)}.{_identifier(rel.to_column)}"
        )

    return "\n".join(lines).rstrip() + "\n"


def render_svg(
    schema: ParsedSchema,
    show_types: bool = True,
    title: Optional[str] = None,
    layout: Optional[LayoutOptions] = None,
) -> str:
    """Draw the schema as a standalone SVG document on the fixed grid."""
    options = layout or LayoutOptions()
    placed = layout_schema(schema, options)
    width = max(placed.width, options.box_width + 2 * options.margin)
    height = max(placed.height, options.header_height + 2 * options.margin)

    parts = [
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{width:g}" height="{height:g}" '
        f'viewBox="0 0 {width:g} {height:g}" font-family="monospace" font-size="13">',
    ]
    if title:
        parts.append(f"  <title>{escape(title)}</title>")

    for connector in placed.connectors:
        parts.append(f'  <path d="{connector.path}" stroke="#4a5568" stroke-width="2" fill="none"/>')

    for box in placed.boxes.values():
        table = box.table
        parts.append(f'  <g class="table" data-table-id="{table.id}">')
        parts.append(
            f'    <rect x="{box.x:g}" y="{box.y:g}" width="{box.width:g}" height="{box.height:g}" '
            f'rx="8" fill="#2d3748" stroke="#4a5568"/>'
        )
        parts.append(
            f'    <text x="{box.x + 12:g}" y="{box.y + options.header_height * 0.65:g}" '
            f'font-weight="bold" fill="#ffffff">{escape(table.name)}</text>'
        )
        for row, column in enumerate(table.columns):
            baseline = box.y + options.header_height + options.row_height * row + options.row_height * 0.65
            marker = "/".join(_key_markers(column))
            parts.append(
                f'    <text x="{box.x + 12:g}" y="{baseline:g}" fill="#e2e8f0">'
                f'{escape(marker + " " if marker else "")}{escape(column.name)}</text>'
            )
            if show_types and column.type:
                parts.append(
                    f'    <text x="{box.x + box.width - 12:g}" y="{baseline:g}" '
                    f'text-anchor="end" fill="#a0aec0">{escape(column.type)}</text>'
                )
        parts.append("  </g>")

    parts.append("</svg>")
    return "\n".join(parts) + "\n"


def render(
    schema: ParsedSchema,
    format: str = DiagramFormat.MERMAID,
    show_types: bool = True,
    title: Optional[str] = None,
    layout: Optional[LayoutOptions] = None,
) -> str:
    """Render ``schema`` in the requested format.

    Raises:
        ValueError: If the format is not a DiagramFormat value
    """
    fmt = DiagramFormat(format)
    log.debug("render_diagram", format=fmt.value, tables=len(schema.tables))

    if fmt == DiagramFormat.MERMAID:
        return render_mermaid(schema, show_types, title)
    if fmt == DiagramFormat.PLANTUML:
        return render_plantuml(schema, show_types, title)
    if fmt == DiagramFormat.D2:
        return render_d2(schema, show_types, title)
    return render_svg(schema, show_types, title, layout)
