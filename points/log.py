"""Log rendering for Points.

Engine modules log through ``logging.getLogger(__name__)`` with
``event key=value`` messages. ``setup_logging()`` puts a structlog
formatter on the root handler so those records come out as JSON lines,
or as coloured console lines when POINTS_DEV_MODE=1.
"""

import logging
import os
import sys

import structlog

QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def _renderer(dev_mode: bool) -> structlog.types.Processor:
    if dev_mode:
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def setup_logging(level: str | None = None) -> None:
    """Route stdlib logging through structlog. Call once at startup."""
    dev_mode = os.environ.get("POINTS_DEV_MODE") == "1"
    level = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()

    pre_chain: list[structlog.types.Processor] = [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if not dev_mode:
        # ConsoleRenderer prints tracebacks itself
        pre_chain.append(structlog.processors.format_exc_info)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=pre_chain,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _renderer(dev_mode),
        ],
    ))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(getattr(logging, level, logging.INFO))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
