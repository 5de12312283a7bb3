"""Helpers for language model output."""

from schemaforge.llm.response import ParsedToolCall, SqlResponseParser, extract_sql

__all__ = ["ParsedToolCall", "SqlResponseParser", "extract_sql"]
