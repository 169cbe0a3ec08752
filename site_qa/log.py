"""structlog setup shared by the command line entry points."""

import logging

import structlog


def configure_logging(log_level: str = "INFO") -> None:
    """Console logging with ISO timestamps, filtered at ``log_level``."""
    level = logging.getLevelName(str(log_level or "INFO").upper())
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.dev.ConsoleRenderer()
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
