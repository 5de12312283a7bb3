"""DDL parsing: CREATE TABLE text to tables, columns and relations."""

from schemaforge.parser.extractor import SchemaExtractor, parse_schema
from schemaforge.parser.models import Column, ParsedSchema, Relation, Table
from schemaforge.parser.scanner import (
    ColumnTokens,
    TableStatement,
    find_reference,
    scan_statements,
    tokenize_column,
)

__all__ = [
    "SchemaExtractor",
    "parse_schema",
    "Column",
    "ParsedSchema",
    "Relation",
    "Table",
    "ColumnTokens",
    "TableStatement",
    "find_reference",
    "scan_statements",
    "tokenize_column",
]
