"""Statement scanner and column tokenizer for CREATE TABLE text.

The scanner walks the text by hand instead of matching one broad pattern
across lines: it finds each ``CREATE TABLE`` header, reads the table name,
then tracks parenthesis depth to find where the body really ends.

Accepted shape::

    CREATE TABLE <name> ( <body> );

Keywords match case-insensitively. Whitespace is required after ``TABLE``
and after the name. The ``)`` that closes the body must be followed directly
by ``;``. A ``;`` inside an open body rejects the statement. When the
parentheses inside a body do not balance (a ``)`` in a comment, a ``':('``
default), the body runs to the ``)`` directly before the first ``;``.
"""

import string
from dataclasses import dataclass, field
from typing import Iterator, Optional

import structlog

log = structlog.get_logger()

HEADER_KEYWORD = "CREATE TABLE"
PRIMARY_KEY_MARKER = "PRIMARY KEY"
REFERENCES_MARKER = "REFERENCES"

# ASCII-only folding keeps string offsets aligned with the source text
_ASCII_UPPER = str.maketrans(string.ascii_lowercase, string.ascii_uppercase)
_WORD_CHARS = frozenset(string.ascii_letters + string.digits + "_")
_NAME_STOP_CHARS = frozenset("();")


def fold_case(text: str) -> str:
    """Upper-case ASCII letters only, preserving length."""
    return text.translate(_ASCII_UPPER)


@dataclass
class TableStatement:
    """One accepted ``CREATE TABLE`` statement."""

    name: str
    body: str
    start: int  # offset of the CREATE keyword
    end: int  # offset just past the terminating ';'


@dataclass
class ColumnTokens:
    """Tokens of one column definition line: name, type, then modifiers."""

    name: str
    type: str
    line: str  # trimmed line with the trailing comma removed
    modifiers: list[str] = field(default_factory=list)

    def has_marker(self, marker: str) -> bool:
        """Case-insensitive search for ``marker`` anywhere on the line."""
        return marker in fold_case(self.line)


def _skip_whitespace(text: str, pos: int) -> int:
    while pos < len(text) and text[pos].isspace():
        pos += 1
    return pos


def _read_while(text: str, pos: int, accept) -> int:
    while pos < len(text) and accept(text[pos]):
        pos += 1
    return pos


def _find_body_end(text: str, open_pos: int) -> Optional[int]:
    """Return the offset of the ``)`` matching the ``(`` at ``open_pos``."""
    depth = 0
    for pos in range(open_pos, len(text)):
        char = text[pos]
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return pos
        elif char == ";":
            return None
    return None


def _find_terminated_close(text: str, open_pos: int) -> Optional[int]:
    """Return the ``)`` directly before the first ``;`` after ``open_pos``.

    Used when parentheses never balance, e.g. a stray ``)`` in a comment or
    a ``'(`` default. The candidate body may not contain another header.
    """
    semicolon = text.find(";", open_pos)
    if semicolon == -1 or text[semicolon - 1] != ")" or semicolon - 1 == open_pos:
        return None
    if HEADER_KEYWORD in fold_case(text[open_pos:semicolon]):
        return None
    return semicolon - 1


def _read_statement(text: str, start: int) -> Optional[TableStatement]:
    """Read the statement whose header begins at ``start``, or None."""
    pos = start + len(HEADER_KEYWORD)
    name_start = _skip_whitespace(text, pos)
    if name_start == pos:
        return None

    name_end = _read_while(
        text,
        name_start,
        lambda c: not c.isspace() and c not in _NAME_STOP_CHARS,
    )
    if name_end == name_start:
        return None

    open_pos = _skip_whitespace(text, name_end)
    if open_pos == name_end or open_pos >= len(text) or text[open_pos] != "(":
        return None

    close_pos = _find_body_end(text, open_pos)
    if close_pos is None or close_pos + 1 >= len(text) or text[close_pos + 1] != ";":
        close_pos = _find_terminated_close(text, open_pos)
        if close_pos is None:
            return None

    body = text[open_pos + 1:close_pos]
    if not body:
        return None

    return TableStatement(
        name=text[name_start:name_end],
        body=body,
        start=start,
        end=close_pos + 2,
    )


def scan_statements(text: str) -> Iterator[TableStatement]:
    """Yield every well-formed ``CREATE TABLE`` statement in ``text``.

    Rejected headers are skipped and scanning resumes at the next
    occurrence of the keyword after them.
    """
    folded = fold_case(text)
    pos = 0
    while True:
        start = folded.find(HEADER_KEYWORD, pos)
        if start == -1:
            return

        statement = _read_statement(text, start)
        if statement is None:
            log.debug("statement_skipped", offset=start, preview=text[start:start + 60])
            pos = start + 1
            continue

        yield statement
        pos = statement.end


def tokenize_column(raw_line: str) -> Optional[ColumnTokens]:
    """Split a body line into column tokens.

    Exactly one trailing comma is removed. Blank lines give None; a
    single-token line gives an empty type.
    """
    line = raw_line.strip()
    if line.endswith(","):
        line = line[:-1]

    tokens = line.split()
    if not tokens:
        return None

    return ColumnTokens(
        name=tokens[0],
        type=tokens[1] if len(tokens) > 1 else "",
        line=line,
        modifiers=tokens[2:],
    )


def _read_reference(line: str, pos: int) -> Optional[tuple[str, str]]:
    table_start = _skip_whitespace(line, pos)
    if table_start == pos:
        return None

    table_end = _read_while(line, table_start, _WORD_CHARS.__contains__)
    if table_end == table_start or table_end >= len(line) or line[table_end] != "(":
        return None

    column_start = table_end + 1
    column_end = _read_while(line, column_start, _WORD_CHARS.__contains__)
    if column_end == column_start or column_end >= len(line) or line[column_end] != ")":
        return None

    return line[table_start:table_end], line[column_start:column_end]


def find_reference(line: str) -> Optional[tuple[str, str]]:
    """Find ``REFERENCES table(column)`` on a line.

    Returns ``(table, column)`` for the first well-formed clause, or None.
    No space is allowed between the table and the ``(``.
    """
    folded = fold_case(line)
    pos = 0
    while True:
        idx = folded.find(REFERENCES_MARKER, pos)
        if idx == -1:
            return None
        target = _read_reference(line, idx + len(REFERENCES_MARKER))
        if target is not None:
            return target
        pos = idx + 1
