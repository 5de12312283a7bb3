"""ER diagram layout and rendering for parsed schemas."""

from schemaforge.diagrams.layout import (
    Connector,
    LayoutOptions,
    Point,
    SchemaLayout,
    TableBox,
    connector_path,
    layout_schema,
)
from schemaforge.diagrams.renderers import (
    DiagramFormat,
    render,
    render_d2,
    render_mermaid,
    render_plantuml,
    render_svg,
)

__all__ = [
    "Connector",
    "LayoutOptions",
    "Point",
    "SchemaLayout",
    "TableBox",
    "connector_path",
    "layout_schema",
    "DiagramFormat",
    "render",
    "render_d2",
    "render_mermaid",
    "render_plantuml",
    "render_svg",
]
