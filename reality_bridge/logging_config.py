"""
Structured logging configuration using structlog.

Produces JSON logs by default, human-readable colored logs at DEBUG level.
Pipeline and resolver modules log through the stdlib ``logging`` module; the
formatter installed here routes those records through structlog and keeps
the pipeline fields (operation, phase, tx hash, error kind) as event keys.

The package never configures logging on import; applications call
``setup_logging`` once at startup.
"""

import logging
import sys
from typing import Optional

import structlog

from .config import settings

# ``extra`` keys pipelines attach to their records, lifted into the event
PIPELINE_LOG_FIELDS = ("operation", "phase", "tx_hash", "error_kind")


def setup_logging(log_level: Optional[str] = None) -> None:
    """Configure structlog for structured logging.

    Args:
        log_level: Override log level (default: from settings.log_level)
    """
    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)
    is_dev = level == logging.DEBUG

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.ExtraAdder(allow=PIPELINE_LOG_FIELDS),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if is_dev:
        renderer = structlog.dev.ConsoleRenderer()
    else:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    # The wallet gateway polls receipts; keep transport chatter out of the logs
    for name in ("httpcore", "httpx"):
        logging.getLogger(name).setLevel(logging.WARNING)
