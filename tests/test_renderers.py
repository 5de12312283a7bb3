"""Tests for ER diagram renderers."""

import pytest

from schemaforge.diagrams import (
    DiagramFormat,
    render,
    render_d2,
    render_mermaid,
    render_plantuml,
    render_svg,
)
from schemaforge.parser import parse_schema


# ═══════════════════════════════════════════════════════════════════════════════
# Mermaid
# ═══════════════════════════════════════════════════════════════════════════════


class TestMermaid:

    def test_blog(self, blog_schema):
        assert render_mermaid(blog_schema) == "\n".join([
            "erDiagram",
            "    users {",
            "        INTEGER id PK",
            "        TEXT name",
            "    }",
            "    posts {",
            "        INTEGER id PK",
            "        INTEGER user_id FK",
            "        VARCHAR(200) title",
            "    }",
            '    users ||--o{ posts : "user_id"',
        ])

    def test_title(self, blog_schema):
        output = render_mermaid(blog_schema, title="Blog")

        assert output.startswith("---\ntitle: Blog\n---\nerDiagram")

    def test_without_types(self, blog_schema):
        output = render_mermaid(blog_schema, show_types=False)

        assert "        string id PK" in output
        assert "INTEGER" not in output

    def test_quoted_column_in_relation_label(self):
        schema = parse_schema('CREATE TABLE p (\n  "author" INT REFERENCES users(id)\n);')

        output = render_mermaid(schema)

        assert output.split("\n")[-1] == '    users ||--o{ p : "author"'
        assert "        INT author FK" in output

    def test_awkward_names_and_types(self):
        schema = parse_schema(
            'CREATE TABLE "Order-Items" (\n'
            "  qty\n"
            "  price NUMERIC(10,2) PRIMARY KEY REFERENCES prices(id)\n"
            ");"
        )

        output = render_mermaid(schema)

        assert '    Order_Items {' in output
        assert "        unknown qty" in output
        assert "        NUMERIC(10_2) price PK, FK" in output


# ═══════════════════════════════════════════════════════════════════════════════
# PlantUML
# ═══════════════════════════════════════════════════════════════════════════════


class TestPlantUML:

    def test_blog(self, blog_schema):
        output = render_plantuml(blog_schema, title="Blog")

        lines = output.split("\n")
        assert lines[0] == "@startuml"
        assert lines[1] == "title Blog"
        assert lines[-1] == "@enduml"
        assert "entity users {" in lines
        assert "    id: INTEGER <<PK>>" in lines
        assert "    user_id: INTEGER <<FK>>" in lines
        assert "users ||--o{ posts : user_id" in lines

    def test_without_types(self, blog_schema):
        output = render_plantuml(blog_schema, show_types=False)

        assert "    id <<PK>>" in output.split("\n")
        assert "    name" in output.split("\n")


# ═══════════════════════════════════════════════════════════════════════════════
# D2
# ═══════════════════════════════════════════════════════════════════════════════


class TestD2:

    def test_blog(self, blog_schema):
        output = render_d2(blog_schema)

        assert "users: {\n    shape: sql_table\n" in output
        assert "    id: INTEGER {constraint: primary_key}" in output
        assert "    user_id: INTEGER {constraint: foreign_key}" in output
        assert output.endswith("posts.user_id -> users.id\n")

    def test_both_constraints(self):
        schema = parse_schema("CREATE TABLE t (\n  id INT PRIMARY KEY REFERENCES o(id)\n);")

        assert "    id: INT {constraint: [primary_key; foreign_key]}" in render_d2(schema)

    def test_without_types(self, blog_schema):
        lines = render_d2(blog_schema, show_types=False).split("\n")

        assert "    id: {constraint: primary_key}" in lines
        assert "    name" in lines

    def test_title(self, blog_schema):
        assert render_d2(blog_schema, title="Blog").startswith("title: Blog\n\nusers: {")


# ═══════════════════════════════════════════════════════════════════════════════
# SVG
# ═══════════════════════════════════════════════════════════════════════════════


class TestSVG:

    def test_document(self, blog_schema):
        output = render_svg(blog_schema, title="Blog & Co")

        assert output.startswith('<svg xmlns="http://www.w3.org/2000/svg" width="620" height="224"')
        assert "<title>Blog &amp; Co</title>" in output
        assert output.count('<g class="table"') == 2
        assert 'data-table-id="1"' in output
        assert '<path d="M 460 112 C 510 112, 110 98, 160 98"' in output
        assert output.rstrip().endswith("</svg>")

    def test_escapes_names(self):
        schema = parse_schema("CREATE TABLE a<b (\n  x&y INT\n);")

        output = render_svg(schema)

        assert "a&lt;b" in output
        assert "x&amp;y" in output
        assert "a<b" not in output

    def test_types_hidden(self, blog_schema):
        assert "VARCHAR(200)" in render_svg(blog_schema)
        assert "VARCHAR(200)" not in render_svg(blog_schema, show_types=False)

    def test_empty_schema_still_valid(self):
        output = render_svg(parse_schema(""))

        assert output.startswith("<svg")
        assert "<g " not in output


# ═══════════════════════════════════════════════════════════════════════════════
# Dispatch
# ═══════════════════════════════════════════════════════════════════════════════


class TestRender:

    @pytest.mark.parametrize("fmt,marker", [
        ("mermaid", "erDiagram"),
        ("plantuml", "@startuml"),
        ("d2", "shape: sql_table"),
        ("svg", "<svg"),
        (DiagramFormat.D2, "shape: sql_table"),
    ])
    def test_formats(self, blog_schema, fmt, marker):
        assert marker in render(blog_schema, fmt)

    @pytest.mark.parametrize("fmt,expected", [
        ("mermaid", "erDiagram"),
        ("plantuml", "@startuml\n@enduml"),
        ("d2", "\n"),
    ])
    def test_empty_schema(self, fmt, expected):
        assert render(parse_schema(""), fmt) == expected

    def test_unknown_format(self, blog_schema):
        with pytest.raises(ValueError):
            render(blog_schema, "graphviz")
