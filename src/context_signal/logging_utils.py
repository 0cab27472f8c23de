"""Logging setup for hosts that embed context-signal.

Library modules only ever call ``logging.getLogger(__name__)`` and attach
``extra={"event": ...}`` fields; this module decides how those records are
rendered and where they go.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import structlog

DEFAULT_LOG_FILE = "~/.local/state/context-signal/signal.log"
QUIET_LOGGERS = ("asyncio",)


def _json_formatter() -> logging.Formatter:
    """JSON lines via structlog, with ``extra=`` fields lifted into the payload."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    return structlog.stdlib.ProcessorFormatter(
        processor=structlog.processors.JSONRenderer(
            ensure_ascii=False, separators=(",", ":")
        ),
        foreign_pre_chain=[
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.ExtraAdder(),
            structlog.processors.TimeStamper(fmt="iso", utc=True),
        ],
    )


def _is_signal_record(record: logging.LogRecord) -> bool:
    return record.name.startswith("context_signal")


def _attach_file_handler(
    root: logging.Logger, path: str, level: int, formatter: logging.Formatter
) -> None:
    target = Path(path).expanduser()
    target.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(target, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(formatter)
    root.addHandler(handler)
    if os.name == "posix":
        try:
            target.chmod(0o600)
        except OSError:
            logging.getLogger(__name__).warning(
                "Unable to enforce 0600 permissions for %s", target
            )


def configure_logging(logging_config: dict[str, Any]) -> None:
    """Install handlers for the ``[logging]`` section of the config.

    Only ``context_signal.*`` records reach stderr, and only at WARNING or
    above, so listener failures and request timeouts stay visible without
    drowning the host's own output. The optional log file gets everything
    at the configured level.
    """
    level_name = str(logging_config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    if logging_config.get("structured", True):
        formatter = _json_formatter()
    else:
        formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    stderr_handler = logging.StreamHandler()
    stderr_handler.setLevel(max(level, logging.WARNING))
    stderr_handler.setFormatter(formatter)
    stderr_handler.addFilter(_is_signal_record)
    root.addHandler(stderr_handler)

    if logging_config.get("log_to_file", False):
        _attach_file_handler(
            root,
            str(logging_config.get("log_file_path", DEFAULT_LOG_FILE)),
            level,
            formatter,
        )

    # Keep the loop's own debug output out of DEBUG-level runs.
    for logger_name in QUIET_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)
