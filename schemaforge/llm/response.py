"""Pull SQL out of language model responses.

Models hand back generated DDL in a few shapes: an ``execute_sql`` tool call
written as JSON, a fenced ```sql block, or plain text. This parser tries each
shape in turn and returns the SQL, or None when the response carries none.
It never raises, since it runs on every streamed chunk.
"""

import json
import re
from dataclasses import dataclass
from typing import Iterable, Optional

import structlog

log = structlog.get_logger()

DEFAULT_TOOL_NAMES = ("execute_sql",)


@dataclass
class ParsedToolCall:
    """A tool call found in model text."""

    name: str
    arguments: dict


class SqlResponseParser:
    """Extracts SQL from model text output."""

    JSON_BLOCK_PATTERN = re.compile(r"```json\s*(\{.+?\})\s*```", re.DOTALL)
    CODE_BLOCK_PATTERN = re.compile(r"```\s*(\{.+?\})\s*```", re.DOTALL)
    # Fence tag: sql or a dialect name, ending at whitespace
    _SQL_FENCE = r"```(?:sql|sqlite|postgresql|postgres|mysql|mariadb|tsql|plsql)(?=\s)[ \t]*\n?"
    SQL_BLOCK_PATTERN = re.compile(_SQL_FENCE + r"(.*?)```", re.DOTALL | re.IGNORECASE)
    OPEN_SQL_FENCE_PATTERN = re.compile(_SQL_FENCE + r"(.*)\Z", re.DOTALL | re.IGNORECASE)
    CREATE_TABLE_PATTERN = re.compile(r"CREATE\s+TABLE", re.IGNORECASE)

    def __init__(self, tool_names: Iterable[str] = DEFAULT_TOOL_NAMES):
        self.tool_names = frozenset(tool_names)

    def extract(self, text: Optional[str]) -> Optional[str]:
        """Return the SQL carried by ``text``, or None."""
        if not text or not text.strip():
            return None

        sql = self._from_tool_calls(text)
        if sql is not None:
            return sql

        sql = self._from_sql_blocks(text)
        if sql is not None:
            return sql

        if self.CREATE_TABLE_PATTERN.search(text):
            log.debug("sql_from_raw_text", text_length=len(text))
            return text.strip()

        log.debug("no_sql_in_response", text_length=len(text), preview=text[:80])
        return None

    def parse_tool_calls(self, text: str) -> list[ParsedToolCall]:
        """Extract tool calls from text, trying fenced then inline JSON."""
        for pattern in (self.JSON_BLOCK_PATTERN, self.CODE_BLOCK_PATTERN):
            calls = []
            for match in pattern.finditer(text):
                call = self._load_call(match.group(1))
                if call:
                    calls.append(call)
            if calls:
                return calls

        calls = []
        for json_str in self._find_json_objects(text):
            call = self._load_call(json_str)
            if call:
                calls.append(call)
        return calls

    def _from_tool_calls(self, text: str) -> Optional[str]:
        for call in self.parse_tool_calls(text):
            if call.name not in self.tool_names:
                continue
            sql = call.arguments.get("sql")
            if isinstance(sql, str):
                log.debug("sql_from_tool_call", tool=call.name)
                return sql
        return None

    def _from_sql_blocks(self, text: str) -> Optional[str]:
        blocks = [m.group(1).strip() for m in self.SQL_BLOCK_PATTERN.finditer(text)]
        blocks = [b for b in blocks if b]

        # A streamed response may end inside an unterminated fence
        tail_start = 0
        for match in self.SQL_BLOCK_PATTERN.finditer(text):
            tail_start = match.end()
        open_fence = self.OPEN_SQL_FENCE_PATTERN.search(text, tail_start)
        if open_fence and open_fence.group(1).strip():
            blocks.append(open_fence.group(1).strip())

        if not blocks:
            return None
        log.debug("sql_from_fenced_blocks", blocks=len(blocks))
        return "\n\n".join(blocks)

    def _load_call(self, json_str: str) -> Optional[ParsedToolCall]:
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            log.debug("tool_call_decode_failed", error=str(e), preview=json_str[:100])
            return None
        if not isinstance(data, dict):
            return None
        return self._extract_from_json(data)

    def _find_json_objects(self, text: str) -> list[str]:
        """Find complete JSON objects in text, ignoring braces inside strings."""
        results = []
        brace_count = 0
        start_pos = None
        in_string = False
        escape_next = False

        for i, char in enumerate(text):
            if escape_next:
                escape_next = False
                continue

            if char == "\\":
                escape_next = True
                continue

            if char == '"':
                in_string = not in_string
                continue

            if in_string:
                continue

            if char == "{":
                if brace_count == 0:
                    start_pos = i
                brace_count += 1
            elif char == "}" and brace_count > 0:
                brace_count -= 1
                if brace_count == 0 and start_pos is not None:
                    json_str = text[start_pos:i + 1]
                    if any(key in json_str for key in ('"name"', '"function"', '"tool"')):
                        results.append(json_str)
                    start_pos = None

        return results

    def _extract_from_json(self, data: dict) -> Optional[ParsedToolCall]:
        """Extract a tool call from a decoded JSON object."""
        name = None
        arguments = None

        # {"name": "tool_name", "arguments": {...}}
        if "name" in data and "arguments" in data:
            name, arguments = data["name"], data["arguments"]
        # {"function": {"name": "...", "arguments": {...}}}
        elif isinstance(data.get("function"), dict):
            func = data["function"]
            name, arguments = func.get("name"), func.get("arguments")
        # {"function": "tool_name", "arguments": {...}}
        elif "function" in data and "arguments" in data:
            name, arguments = data["function"], data["arguments"]
        # {"tool": "tool_name", "args": {...}}
        elif "tool" in data and "args" in data:
            name, arguments = data["tool"], data["args"]

        if not isinstance(name, str):
            return None

        # OpenAI-style calls carry arguments as a JSON string
        if isinstance(arguments, str):
            try:
                arguments = json.loads(arguments)
            except json.JSONDecodeError:
                log.debug("tool_arguments_decode_failed", tool=name)
                return None

        if not isinstance(arguments, dict):
            return None
        return ParsedToolCall(name=name, arguments=arguments)


def extract_sql(text: Optional[str]) -> Optional[str]:
    """Extract SQL from a model response with the default tool names."""
    return SqlResponseParser().extract(text)
