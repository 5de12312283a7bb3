"""Fixed grid placement for schema diagrams.

Tables are dropped onto a grid in declaration order; there is no attempt to
minimise crossings. Connectors are cubic curves between box centres.
"""

from dataclasses import dataclass, field
from typing import Optional

from schemaforge.parser import ParsedSchema, Relation, Table


@dataclass
class LayoutOptions:
    """Grid constants, in pixels."""

    columns: int = 3
    x_spacing: int = 300
    y_spacing: int = 250
    margin: int = 50
    box_width: int = 220
    header_height: int = 40
    row_height: int = 28
    bend: int = 50


@dataclass
class Point:
    x: float
    y: float


@dataclass
class TableBox:
    """Screen rectangle for one table."""

    table: Table
    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)


@dataclass
class Connector:
    relation: Relation
    start: Point
    end: Point
    path: str


@dataclass
class SchemaLayout:
    boxes: dict[int, TableBox] = field(default_factory=dict)  # keyed by table id
    connectors: list[Connector] = field(default_factory=list)
    width: float = 0
    height: float = 0


def connector_path(start: Point, end: Point, bend: float = 50) -> str:
    """SVG path data for a curve from ``start`` to ``end``."""
    return (
        f"M {start.x:g} {start.y:g} "
        f"C {start.x + bend:g} {start.y:g}, {end.x - bend:g} {end.y:g}, {end.x:g} {end.y:g}"
    )


def layout_schema(schema: ParsedSchema, options: Optional[LayoutOptions] = None) -> SchemaLayout:
    """Place every table on the grid and route one connector per relation.

    Relations whose tables cannot be found get no connector. When names are
    duplicated the first table with that name is used.
    """
    options = options or LayoutOptions()
    columns = max(options.columns, 1)
    layout = SchemaLayout()

    for index, table in enumerate(schema.tables):
        box = TableBox(
            table=table,
            x=(index % columns) * options.x_spacing + options.margin,
            y=(index // columns) * options.y_spacing + options.margin,
            width=options.box_width,
            height=options.header_height + options.row_height * len(table.columns),
        )
        layout.boxes[table.id] = box
        layout.width = max(layout.width, box.x + box.width + options.margin)
        layout.height = max(layout.height, box.y + box.height + options.margin)

    for relation in schema.relations:
        source = schema.find_table(relation.from_table)
        target = schema.find_table(relation.to_table)
        if source is None or target is None:
            continue
        start = layout.boxes[source.id].center
        end = layout.boxes[target.id].center
        layout.connectors.append(Connector(
            relation=relation,
            start=start,
            end=end,
            path=connector_path(start, end, options.bend),
        ))

    return layout
