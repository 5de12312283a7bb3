"""Structured logging configuration.

structlog events are rendered by stdlib handlers through
``structlog.stdlib.ProcessorFormatter``, so records from plain ``logging``
callers get the same timestamp, level and logger fields. The console handler
writes to stderr, keeping stdout free for diagrams and JSON. The log file, when
configured, always receives one JSON object per line.
"""

import sys
import logging
from pathlib import Path
from typing import Optional, TextIO
import structlog

# Applied to structlog events and to foreign stdlib records alike
SHARED_PROCESSORS = [
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
]


def _formatter(renderer) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=SHARED_PROCESSORS,
    )


def setup_logging(
    level: str = "WARNING",
    log_file: Optional[str] = None,
    json_format: bool = False,
    stream: Optional[TextIO] = None,
):
    """Configure structured logging, replacing any earlier setup.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR); unknown names mean WARNING
        log_file: Optional path to a JSON-lines log file
        json_format: Render console logs as JSON instead of key=value text
        stream: Stream for console logs (default: stderr)
    """
    numeric_level = getattr(logging, level.upper(), logging.WARNING)

    console = logging.StreamHandler(stream or sys.stderr)
    console.setFormatter(_formatter(
        structlog.processors.JSONRenderer() if json_format
        else structlog.dev.ConsoleRenderer(colors=False)
    ))
    handlers = [console]

    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(_formatter(structlog.processors.JSONRenderer()))
        handlers.append(file_handler)

    logging.basicConfig(level=numeric_level, handlers=handlers, force=True)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *SHARED_PROCESSORS,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # CLI runs reconfigure once the config file is known
        cache_logger_on_first_use=False,
    )
