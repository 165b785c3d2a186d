"""
Logging for the notes CLI and engine.

Diagnostics go to stderr so they never mix with the command output Rich
writes to stdout. Records can also be appended to a rotating JSONL file
(config/settings/logging.yaml, `file` section).

Every record carries a `source` naming the part of the system that wrote it
(cli, sync, cache, remote, ai). Pass it with log_with_source:

    logger = get_logger(__name__)
    log_with_source(logger, "sync", "info", "Note promoted", note_id="abc")
"""

import logging
import sys
from functools import lru_cache
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.typing import Processor

from ainotes.core.config import find_project_root, load_yaml_config

VALID_SOURCES = frozenset({"cli", "sync", "cache", "remote", "ai", "internal", "unknown"})

# Libraries whose request-level chatter is only useful when debugging them.
_QUIET_LOGGERS = ("httpx", "httpcore")


@lru_cache
def _load_logging_config() -> dict[str, Any]:
    return load_yaml_config("logging.yaml")


def _resolve_log_path(configured_path: str) -> Path:
    """Log paths in logging.yaml are relative to the project root."""
    return find_project_root() / configured_path


def _processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ],
        ),
    ]


def _formatter(renderer: Processor) -> logging.Formatter:
    return structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=_processors(),
    )


def _stderr_handler(format_type: str) -> logging.Handler:
    if format_type == "console":
        renderer: Processor = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    else:
        renderer = structlog.processors.JSONRenderer()
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_formatter(renderer))
    return handler


def _file_handler(file_config: dict[str, Any]) -> logging.Handler:
    log_path = _resolve_log_path(file_config["path"])
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        filename=str(log_path),
        maxBytes=file_config["max_bytes"],
        backupCount=file_config["backup_count"],
        encoding="utf-8",
    )
    handler.setFormatter(_formatter(structlog.processors.JSONRenderer()))
    return handler


def setup_logging(
    level: str | None = None,
    format_type: str | None = None,
    enable_file_logging: bool | None = None,
) -> None:
    """
    Route structlog and stdlib records to stderr and, optionally, the JSONL file.

    Arguments left as None take their value from logging.yaml. Calling this
    again replaces the handlers installed by the previous call.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        format_type: 'console' for readable lines, 'json' for one object per line
        enable_file_logging: Also write to the rotating JSONL file
    """
    config = _load_logging_config()
    file_config = config["file"]
    if enable_file_logging is None:
        enable_file_logging = file_config["enabled"]

    structlog.configure(
        processors=_processors() + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger()
    root.setLevel(getattr(logging, (level or config["level"]).upper()))
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    root.addHandler(_stderr_handler(format_type or config["format"]))
    if enable_file_logging:
        root.addHandler(_file_handler(file_config))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> Any:
    return structlog.get_logger(name)


def log_with_source(logger: Any, source: str, level: str, message: str, **kwargs: Any) -> None:
    """
    Log `message` at `level` with an explicit `source` field.

    Raises:
        AttributeError: If level is not a log method name
    """
    getattr(logger, level.lower())(message, source=source, **kwargs)
