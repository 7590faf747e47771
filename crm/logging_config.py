"""
logging_config.py — Loguru as the one logging backend

Every record, whether it comes from `loguru.logger` or from a stdlib
`logging.getLogger()` call (ours, uvicorn's, SQLAlchemy's), ends up in the
same Loguru sinks with the request id the middleware bound.

Business Rules:
- Production (APP_URL not localhost): JSON lines on stdout
- Development and tests: coloured single-line format
- LOG_FILE set → an extra rotating JSON file sink (20 MB, 14 days)
- Records logged outside a request carry request_id "-"

Called by: crm/main.py (lifespan)
Depends on: crm/config.py (log_level, log_file, app_url)
"""

import logging
import sys

from loguru import logger

from .config import settings

DEV_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[request_id]}</cyan> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "{message}"
)
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access", "sqlalchemy.engine", "multipart")


def setup_logging() -> None:
    """Install the sinks and route stdlib logging through Loguru.

    Idempotent: existing sinks are dropped first.
    """
    level = settings.log_level.upper()
    json_output = settings.is_production and not settings.testing

    logger.remove()
    logger.configure(extra={"request_id": "-"})
    if json_output:
        logger.add(sys.stdout, level=level, format="{message}", serialize=True)
    else:
        logger.add(sys.stdout, level=level, format=DEV_FORMAT, colorize=True)

    if settings.log_file and not settings.testing:
        logger.add(
            settings.log_file,
            level=level,
            serialize=True,
            rotation="20 MB",
            retention="14 days",
            compression="gz",
        )

    logging.basicConfig(handlers=[_StdlibBridge()], level=0, force=True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.info("Logging ready (level={}, json={}, file={})", level, json_output, settings.log_file or "-")


class _StdlibBridge(logging.Handler):
    """Forward stdlib log records to Loguru, keeping the caller's location."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk out of the logging module so {name}:{line} point at the caller
        frame, depth = logging.currentframe(), 0
        while frame is not None and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())
