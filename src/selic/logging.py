"""Structured logging for the SELIC correction service (structlog over stdlib).

CorrectionService binds the SGS series code with
structlog.contextvars.bound_contextvars for the length of one request, so
every fetch, retry and accrual event it triggers carries ``series_code``.
The engine logs each accumulated month at DEBUG and the factor at INFO.
"""

import logging
import os

import structlog


def setup_logging(log_level: str = "INFO") -> None:
    """Route structlog and stdlib records through a single handler.

    LOG_FORMAT selects the renderer: "json" (one object per line, e.g.
    {"event": "fetch_retry", "series_code": 4390, ...}) or "console"
    (default). httpx request lines are silenced below WARNING.
    """
    log_format = os.environ.get("LOG_FORMAT", "console").lower()

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

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
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # httpx logs every request at INFO; the fetcher already reports attempts
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger with the given name."""
    return structlog.get_logger(name)
