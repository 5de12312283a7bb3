"""Data models for parsed schemas.

These are transient value objects: a fresh set is built on every parse call
and handed to the diagram layer, which replaces its previous copy wholesale.
"""

import json
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class Column:
    """A column recovered from one line of a table body."""

    name: str
    type: str = ""  # empty when the line had a single token
    is_primary_key: bool = False
    is_foreign_key: bool = False

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "type": self.type,
            "isPrimaryKey": self.is_primary_key,
            "isForeignKey": self.is_foreign_key,
        }


@dataclass
class Table:
    """A table from a ``CREATE TABLE`` statement.

    ``id`` is the 0-based position among the tables of a single parse call.
    It is not a persistent identifier.
    """

    id: int
    name: str
    columns: list[Column] = field(default_factory=list)

    @property
    def primary_keys(self) -> list[Column]:
        return [c for c in self.columns if c.is_primary_key]

    @property
    def foreign_keys(self) -> list[Column]:
        return [c for c in self.columns if c.is_foreign_key]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "columns": [c.to_dict() for c in self.columns],
        }


@dataclass
class Relation:
    """A foreign-key edge from a referencing column to a referenced column."""

    from_table: str
    from_column: str
    to_table: str
    to_column: str

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "fromTable": self.from_table,
            "fromColumn": self.from_column,
            "toTable": self.to_table,
            "toColumn": self.to_column,
        }


@dataclass
class ParsedSchema:
    """Tables and relations recovered from a block of DDL text."""

    tables: list[Table] = field(default_factory=list)
    relations: list[Relation] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.tables

    def find_table(self, name: str) -> Optional[Table]:
        """Return the first table with ``name``, or None.

        Duplicate names are kept by the parser; lookups resolve to the
        earliest declaration.
        """
        for table in self.tables:
            if table.name == name:
                return table
        return None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "tables": [t.to_dict() for t in self.tables],
            "relations": [r.to_dict() for r in self.relations],
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)
