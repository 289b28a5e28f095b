"""
Logging configuration for the API.

Usage:
    # In services, use the contextual logger so lines carry the request ID:
    from middleware.logging_middleware import get_logger
    logger = get_logger(__name__)

    logger.info("Search completed")  # "[1a2b3c4d] Search completed"

    # Or use standard logging (no request ID):
    import logging
    logger = logging.getLogger(__name__)

    # structlog loggers go through the same handlers:
    import structlog
    logger = structlog.get_logger(__name__)
    logger.info("suggestions served", products=8)

With LOG_FORMAT=json every line is one JSON object; fields passed via
``extra=`` show up as keys.
"""
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

import structlog

from core.config import settings

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = (
    "uvicorn.access",
    "uvicorn.error",
    "httpx",
    "httpcore",
    "asyncpg",
    "sqlalchemy.engine",
    "sqlalchemy.pool",
)


# Applied to both structlog events and plain stdlib records
SHARED_PROCESSORS = [
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.ExtraAdder(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]


def build_formatter(log_format: str) -> structlog.stdlib.ProcessorFormatter:
    """Render stdlib records (and any extra= fields) through structlog."""
    if log_format == "json":
        renderer = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        renderer = [structlog.dev.ConsoleRenderer(colors=False, exception_formatter=structlog.dev.plain_traceback)]

    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=SHARED_PROCESSORS,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *renderer],
    )


def setup_logging():
    """Configure structlog and route the stdlib root logger through it."""

    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            *SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = build_formatter(settings.log_format)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if settings.environment == "production":
        log_dir = Path("logs")
        log_dir.mkdir(exist_ok=True)

        # Files are always JSON so they can be shipped as-is
        file_formatter = build_formatter("json")

        file_handler = RotatingFileHandler(
            log_dir / "search.log",
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(file_formatter)
        root_logger.addHandler(file_handler)

        error_handler = RotatingFileHandler(
            log_dir / "search_errors.log",
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(file_formatter)
        root_logger.addHandler(error_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging configured",
        extra={"log_level": settings.log_level, "log_format": settings.log_format, "environment": settings.environment},
    )
