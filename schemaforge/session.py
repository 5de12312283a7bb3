"""Live schema session for UIs that re-render while text changes.

The session keeps the latest parsed schema for a piece of DDL that is being
typed or streamed from a model. Every accepted update re-parses the whole
text and replaces the previous schema; results arriving out of order are
dropped by revision number.
"""

from typing import Callable, Optional

import structlog

from schemaforge.llm.response import SqlResponseParser
from schemaforge.parser import ParsedSchema, SchemaExtractor

log = structlog.get_logger()

SchemaListener = Callable[[ParsedSchema], None]


class SchemaSession:
    """Last-write-wins holder of the current ParsedSchema."""

    def __init__(
        self,
        extractor: Optional[SchemaExtractor] = None,
        response_parser: Optional[SqlResponseParser] = None,
    ):
        self._extractor = extractor or SchemaExtractor()
        self._response_parser = response_parser or SqlResponseParser()
        self._listeners: list[SchemaListener] = []
        self._schema = ParsedSchema()
        self._source = ""
        self._buffer = ""
        self._revision = 0

    @property
    def schema(self) -> ParsedSchema:
        return self._schema

    @property
    def source(self) -> str:
        return self._source

    @property
    def revision(self) -> int:
        return self._revision

    @property
    def buffer(self) -> str:
        """Model response text received so far through feed()."""
        return self._buffer

    def subscribe(self, listener: SchemaListener):
        """Call ``listener`` with the new schema after each accepted update."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: SchemaListener):
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def update(self, text: Optional[str], revision: Optional[int] = None) -> bool:
        """Parse ``text`` and make it the current schema.

        Args:
            text: Full DDL text (not a delta)
            revision: Caller-assigned revision; None takes the next one

        Returns:
            False if the update was stale and discarded, True otherwise
        """
        if revision is None:
            revision = self._revision + 1
        elif revision < self._revision:
            log.debug("stale_update_discarded", revision=revision, current=self._revision)
            return False

        schema = self._extractor.parse(text)
        self._revision = revision
        self._source = text or ""
        self._schema = schema
        log.debug(
            "session_updated",
            revision=revision,
            tables=len(schema.tables),
            relations=len(schema.relations),
        )
        self._notify(schema)
        return True

    def feed(self, chunk: str) -> bool:
        """Append a streamed model chunk and re-parse if its SQL changed.

        Returns:
            True if the schema was replaced
        """
        self._buffer += chunk
        sql = self._response_parser.extract(self._buffer)
        if sql is None or sql == self._source:
            return False
        return self.update(sql)

    def reset(self):
        """Drop the current buffer, source and schema."""
        self._revision += 1
        self._buffer = ""
        self._source = ""
        self._schema = ParsedSchema()
        log.debug("session_reset", revision=self._revision)
        self._notify(self._schema)

    def _notify(self, schema: ParsedSchema):
        for listener in list(self._listeners):
            try:
                listener(schema)
            except Exception as e:
                log.error("schema_listener_failed", revision=self._revision, error=str(e))
