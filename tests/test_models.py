"""Tests for schema value objects."""

import json

from schemaforge.parser import Column, ParsedSchema, Relation, Table


class TestColumn:

    def test_defaults(self):
        column = Column(name="id")

        assert column.type == ""
        assert not column.is_primary_key
        assert not column.is_foreign_key

    def test_to_dict_keys(self):
        column = Column(name="id", type="INT", is_primary_key=True)

        assert column.to_dict() == {
            "name": "id",
            "type": "INT",
            "isPrimaryKey": True,
            "isForeignKey": False,
        }


class TestTable:

    def test_key_views(self):
        table = Table(id=0, name="posts", columns=[
            Column(name="id", type="INT", is_primary_key=True),
            Column(name="user_id", type="INT", is_foreign_key=True),
            Column(name="title", type="TEXT"),
        ])

        assert [c.name for c in table.primary_keys] == ["id"]
        assert [c.name for c in table.foreign_keys] == ["user_id"]


class TestParsedSchema:

    def test_empty(self):
        schema = ParsedSchema()

        assert schema.is_empty
        assert schema.to_dict() == {"tables": [], "relations": []}

    def test_find_table(self, blog_schema):
        assert blog_schema.find_table("posts").id == 1
        assert blog_schema.find_table("missing") is None

    def test_to_json(self, blog_schema):
        data = json.loads(blog_schema.to_json())

        assert [t["name"] for t in data["tables"]] == ["users", "posts"]
        assert data["tables"][1]["columns"][1] == {
            "name": "user_id",
            "type": "INTEGER",
            "isPrimaryKey": False,
            "isForeignKey": True,
        }
        assert data["relations"] == [{
            "fromTable": "posts",
            "fromColumn": "user_id",
            "toTable": "users",
            "toColumn": "id",
        }]

    def test_to_json_compact(self):
        schema = ParsedSchema(tables=[Table(id=0, name="t")])

        assert schema.to_json(indent=None) == '{"tables": [{"id": 0, "name": "t", "columns": []}], "relations": []}'

    def test_equality(self):
        a = ParsedSchema(relations=[Relation("a", "b", "c", "d")])
        b = ParsedSchema(relations=[Relation("a", "b", "c", "d")])

        assert a == b
