"""schemaforge - SQL schemas to ER diagrams.

Recovers tables, columns and foreign-key relations from CREATE TABLE text,
typed by hand or streamed from a language model, and renders them as
entity-relationship diagrams.
"""

__version__ = "0.1.0"

from schemaforge.parser import Column, ParsedSchema, Relation, SchemaExtractor, Table, parse_schema
from schemaforge.session import SchemaSession

__all__ = [
    "__version__",
    "Column",
    "ParsedSchema",
    "Relation",
    "SchemaExtractor",
    "Table",
    "parse_schema",
    "SchemaSession",
]
