"""
Loguru logging configuration with Sentry integration.

Features:
- Console logging for development
- Structured JSON logging for production
- Correlation ID in all log messages
- Optional rotating file sink
"""

import sys
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from core.correlation import get_correlation_id

if TYPE_CHECKING:
    from loguru import Record


LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[correlation_id]}</cyan> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


def correlation_filter(record: "Record") -> bool:
    """
    Add correlation ID to log record.

    Args:
        record: Loguru log record.

    Returns:
        Always True (filter never drops messages).
    """
    record["extra"]["correlation_id"] = get_correlation_id() or "-"
    return True


def configure_logging(
    environment: str = "development", log_file: str | None = None
) -> None:
    """
    Configure Loguru for the application.

    Args:
        environment: "development" for colored console output, anything else
            for JSON lines.
        log_file: Optional path of a rotating log file.
    """
    # Remove default handler
    logger.remove()

    development = environment == "development"

    if development:
        logger.add(
            sys.stderr,
            format=LOG_FORMAT,
            level="DEBUG",
            filter=correlation_filter,
            colorize=True,
        )
    else:
        # JSON format for production (machine-parseable)
        logger.add(
            sys.stderr,
            format="{message}",
            level="INFO",
            filter=correlation_filter,
            serialize=True,
        )

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            format=LOG_FORMAT if development else "{message}",
            level="INFO",
            filter=correlation_filter,
            rotation="10 MB",
            retention="7 days",
            serialize=not development,
        )
