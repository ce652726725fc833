"""Logging configuration for the application."""

import logging
import logging.handlers
import sys
import time
from pathlib import Path
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from price_analyzer.config import LOGS_DIR, settings

logger = logging.getLogger(__name__)

APP_LOG = "app.log"
ERROR_LOG = "errors.log"


def _prune_rotations(log_file: Path, keep: int) -> int:
    """Delete the oldest dated rotations of ``log_file`` beyond ``keep``.

    Returns:
        Number of files removed
    """
    rotations = sorted(
        (f for f in log_file.parent.glob(f"{log_file.name}.*") if f.is_file()),
        key=lambda f: f.stat().st_mtime,
        reverse=True,
    )
    removed = 0
    for stale in rotations[keep:]:
        try:
            stale.unlink()
            removed += 1
        except OSError as e:
            logger.error(f"Failed to delete old log file {stale}: {e}")
    return removed


def _rotating_handler(log_file: Path, level: str, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.handlers.TimedRotatingFileHandler(
        log_file,
        when="midnight",
        backupCount=settings.logging.backup_count,
        encoding="utf-8",
        delay=True,
    )
    handler.suffix = "%Y-%m-%d"
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(log_dir: Path = LOGS_DIR) -> None:
    """Console output plus daily-rotated application and error logs under ``log_dir``."""
    log_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(settings.logging.log_level)
    console_handler.setFormatter(logging.Formatter(settings.logging.format))
    root_logger.addHandler(console_handler)

    file_formatter = logging.Formatter(settings.logging.file_format)
    for name, level in ((APP_LOG, settings.logging.file_log_level), (ERROR_LOG, "ERROR")):
        root_logger.addHandler(_rotating_handler(log_dir / name, level, file_formatter))
        removed = _prune_rotations(log_dir / name, settings.logging.backup_count)
        if removed:
            logger.info(f"Deleted {removed} old rotations of {name}")

    for logger_name, level in settings.logging.noisy_loggers.items():
        logging.getLogger(logger_name).setLevel(level)

    logger.debug(f"Logging to {log_dir}")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs method, path, status and duration of every request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(level, f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms:.1f}ms)")
        return response
