"""Structured logging configuration using structlog.

Application code logs through stdlib loggers with snake_case event names and
``extra={...}`` context. structlog's ``ProcessorFormatter`` renders those
records, lifting the ``extra`` fields into the event dict.
"""
from __future__ import annotations

import logging
import sys

import structlog
from structlog.types import Processor


def _shared_processors() -> list[Processor]:
    return [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.ExtraAdder(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
    ]


def build_formatter(json_logs: bool = False) -> structlog.stdlib.ProcessorFormatter:
    renderer: Processor
    if json_logs:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.processors.KeyValueRenderer(
            key_order=["timestamp", "level", "logger", "event"], drop_missing=True
        )
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_shared_processors(),
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """Install one stdout handler on the root logger; safe to call repeatedly.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Render JSON lines instead of key=value pairs
    """
    root = logging.getLogger()
    for existing in [h for h in root.handlers if getattr(h, "_app_handler", False)]:
        root.removeHandler(existing)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(build_formatter(json_logs))
    handler._app_handler = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(level.upper())
    # The SDK's transport logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
