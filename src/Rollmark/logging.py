# logging.py

import logging
import os
from logging.handlers import RotatingFileHandler

import structlog
from structlog.contextvars import merge_contextvars

from Rollmark.config import Settings


def setup_logging(settings: Settings | None = None) -> None:
    """Initialize structlog + stdlib logging.

    Every record, from structlog or the stdlib, is rendered as one JSON object
    per line. The dice engine logs its hot paths (``dice.parse.invalid``,
    ``rules.dice.roll.*``, ``history.evicted``, ``scanner.scan.done``) at DEBUG,
    so at the default INFO level only ``dice.activate.invalid_notation``
    warnings show up.

    Handlers:
      - console (stderr): on at ``logging_console`` (INFO by default);
        ``NONE`` turns it off.
      - rotating file: off unless ``logging_file`` names a level; writes to
        ``logging_file_path`` (``logs/rollmark.jsonl``) and rotates at
        ``logging_max_bytes``.

    Without settings: INFO on the console, no file.
    """
    level_name = (settings.logging_level if settings else "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    logging.captureWarnings(True)

    # ProcessorFormatter renders BOTH structlog and stdlib logs as JSON
    processor_formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.add_log_level,
            merge_contextvars,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        foreign_pre_chain=[
            structlog.processors.add_log_level,
            merge_contextvars,
        ],
    )

    root_handlers: list[logging.Handler] = []
    # Console handler writes to stderr; stdout belongs to the CLI
    console_lvl_name = settings.logging_console if settings is not None else level_name
    if (console_lvl_name or "").upper() != "NONE":
        ch = logging.StreamHandler()
        ch.setLevel(getattr(logging, console_lvl_name.upper(), level))
        ch.setFormatter(processor_formatter)
        root_handlers.append(ch)

    # File handler only when logging_file names a level
    file_lvl_name = settings.logging_file if settings is not None else "NONE"
    if (file_lvl_name or "").upper() != "NONE":
        path = settings.logging_file_path if settings is not None else "logs/rollmark.jsonl"
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        fh = RotatingFileHandler(
            path,
            maxBytes=(settings.logging_max_bytes if settings else 5_000_000),
            backupCount=(settings.logging_backup_count if settings else 5),
        )
        fh.setLevel(getattr(logging, file_lvl_name.upper(), level))
        fh.setFormatter(processor_formatter)
        root_handlers.append(fh)

    # force=True to replace any prior configuration
    logging.basicConfig(level=level, handlers=root_handlers, force=True)

    structlog.configure(
        processors=[
            merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
