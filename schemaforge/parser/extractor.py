"""Best-effort extraction of tables and foreign-key relations from DDL text."""

from typing import Optional

import structlog

from schemaforge.parser.models import Column, ParsedSchema, Relation, Table
from schemaforge.parser.scanner import (
    PRIMARY_KEY_MARKER,
    REFERENCES_MARKER,
    find_reference,
    scan_statements,
    tokenize_column,
)

log = structlog.get_logger()


class SchemaExtractor:
    """Converts raw DDL text into a ParsedSchema.

    Never raises for any input string. Statements that do not fit the
    ``CREATE TABLE name ( body );`` shape are dropped, malformed column lines
    become columns with an empty type, and unparseable reference clauses
    leave the column flagged as a foreign key without a relation.

    The extractor keeps no state between calls, so one instance can be
    shared by every caller.
    """

    def parse(self, ddl_text: Optional[str]) -> ParsedSchema:
        """Parse ``ddl_text`` into tables and relations."""
        if not ddl_text:
            return ParsedSchema()

        schema = ParsedSchema()
        for statement in scan_statements(ddl_text):
            table = Table(id=len(schema.tables), name=statement.name)

            for line in statement.body.split("\n"):
                tokens = tokenize_column(line)
                if tokens is None:
                    continue

                column = Column(
                    name=tokens.name,
                    type=tokens.type,
                    is_primary_key=tokens.has_marker(PRIMARY_KEY_MARKER),
                    is_foreign_key=tokens.has_marker(REFERENCES_MARKER),
                )
                table.columns.append(column)

                if column.is_foreign_key:
                    target = find_reference(tokens.line)
                    if target is None:
                        log.debug(
                            "reference_unparsed",
                            table=table.name,
                            column=column.name,
                        )
                        continue
                    to_table, to_column = target
                    schema.relations.append(Relation(
                        from_table=table.name,
                        from_column=column.name,
                        to_table=to_table,
                        to_column=to_column,
                    ))

            schema.tables.append(table)

        log.debug(
            "schema_parsed",
            text_length=len(ddl_text),
            tables=len(schema.tables),
            relations=len(schema.relations),
        )
        return schema


_default_extractor = SchemaExtractor()


def parse_schema(ddl_text: Optional[str]) -> ParsedSchema:
    """Parse DDL text with a shared SchemaExtractor."""
    return _default_extractor.parse(ddl_text)
