"""Shared logging configuration using structlog.

Logs always go to stderr (plus an optional file) so that result records
written to stdout can be piped without interleaved log lines.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog

from fc_common.config.env import parse_bool_env

# The AWS SDK logs every request at DEBUG; keep it out unless asked for.
_SDK_LOGGERS = ("boto3", "botocore", "urllib3")


def _resolve_level(value: str | int | None, debug: bool) -> int:
    if debug:
        return logging.DEBUG
    if isinstance(value, int):
        return value
    if not value:
        return logging.INFO
    if value.strip().isdigit():
        return int(value)
    return logging.getLevelNamesMapping().get(value.strip().upper(), logging.INFO)


def _pre_chain() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def _build_handlers(json_output: bool, log_file: str | None) -> list[logging.Handler]:
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )
    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer, foreign_pre_chain=_pre_chain()
    )
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure_logging(
    *,
    level: str | int | None = None,
    debug: bool = False,
    log_file: str | None = None,
    json: bool | None = None,
    force: bool = False,
) -> None:
    """Configure stdlib logging and structlog with a shared formatter.

    FC_LOG_LEVEL, FC_LOG_JSON and FC_LOG_FILE fill in unset arguments.
    Without ``force`` an already configured root logger is left alone and
    only structlog is (re)configured.
    """
    root_logger = logging.getLogger()
    if force or not root_logger.handlers:
        resolved_json = json if json is not None else parse_bool_env(os.environ.get("FC_LOG_JSON"))
        resolved_file = log_file if log_file is not None else os.environ.get("FC_LOG_FILE")
        if force:
            for handler in list(root_logger.handlers):
                root_logger.removeHandler(handler)
        for handler in _build_handlers(bool(resolved_json), resolved_file):
            root_logger.addHandler(handler)
        root_logger.setLevel(_resolve_level(level or os.environ.get("FC_LOG_LEVEL"), debug))
        sdk_level = logging.DEBUG if debug else logging.WARNING
        for name in _SDK_LOGGERS:
            logging.getLogger(name).setLevel(sdk_level)

    structlog.configure(
        processors=[*_pre_chain(), structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


@contextmanager
def bound_run_context(**fields: Any) -> Iterator[None]:
    """Attach ``fields`` to every log line emitted inside the block."""
    with structlog.contextvars.bound_contextvars(**fields):
        yield
