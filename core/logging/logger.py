"""
Host logging: named streams, per-job correlation ids, rotating JSON files.

Streams (logger "algohost.<stream>"):
- system     startup, configuration, shutdown
- setup      algorithm loading and job setup
- algorithm  messages from user algorithms (child loggers per class)

Every record carries ``correlation_id`` (the job being set up, or None).
"""

import functools
import logging
import logging.handlers
import time
import uuid
from contextvars import ContextVar
from pathlib import Path
from typing import Optional

_correlation_id: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)

ROOT_LOGGER = "algohost"


class LogStream:
    """Log stream identifiers."""
    SYSTEM = "system"
    SETUP = "setup"
    ALGORITHM = "algorithm"

    ALL = (SYSTEM, SETUP, ALGORITHM)


# ============================================================================
# CORRELATION IDS
# ============================================================================

def set_correlation_id(correlation_id: Optional[str] = None) -> str:
    """Set (or generate, when None) the correlation id for this context."""
    if correlation_id is None:
        correlation_id = str(uuid.uuid4())
    _correlation_id.set(correlation_id)
    return correlation_id


def get_correlation_id() -> Optional[str]:
    return _correlation_id.get()


class LogContext:
    """
    Scope a correlation id; the previous one is restored on exit.

    Usage:
        with LogContext(job.algorithm_id):
            logger.info("Setting up job")
    """

    def __init__(self, correlation_id: Optional[str] = None):
        self.correlation_id = correlation_id
        self._token = None

    def __enter__(self) -> str:
        correlation_id = self.correlation_id or str(uuid.uuid4())
        self._token = _correlation_id.set(correlation_id)
        return correlation_id

    def __exit__(self, exc_type, exc_val, exc_tb):
        _correlation_id.reset(self._token)


_base_record_factory = logging.getLogRecordFactory()


def _record_with_correlation_id(*args, **kwargs):
    record = _base_record_factory(*args, **kwargs)
    record.correlation_id = get_correlation_id()
    return record


logging.setLogRecordFactory(_record_with_correlation_id)


# ============================================================================
# SETUP
# ============================================================================

_configured = False


def setup_logging(
    log_dir: Path = Path("logs"),
    log_level: str = "INFO",
    console_level: str = "INFO",
    json_logs: bool = True,
    max_bytes: int = 10_000_000,
    backup_count: int = 5
) -> None:
    """
    Attach handlers to the host loggers (first call per process wins).

    Creates ``<log_dir>/<stream>/<stream>.log`` per stream (rotating) and a
    console handler on the "algohost" logger. Handlers are attached to the
    host loggers only; the root logger is left alone.

    Args:
        log_dir: Base directory for stream files
        log_level: File level (DEBUG .. CRITICAL)
        console_level: Console level
        json_logs: JSON lines (True) or plain text files
        max_bytes: Rotation size per file
        backup_count: Rotated files kept per stream
    """
    global _configured

    if _configured:
        return

    from .formatters import ConsoleFormatter, JSONFormatter

    log_dir = Path(log_dir)
    file_level = getattr(logging, log_level.upper())

    host = logging.getLogger(ROOT_LOGGER)
    host.setLevel(logging.DEBUG)

    console = logging.StreamHandler()
    console.setLevel(getattr(logging, console_level.upper()))
    console.setFormatter(ConsoleFormatter())
    host.addHandler(console)

    for stream in LogStream.ALL:
        (log_dir / stream).mkdir(parents=True, exist_ok=True)

        handler = logging.handlers.RotatingFileHandler(
            log_dir / stream / f"{stream}.log",
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding='utf-8'
        )
        handler.setLevel(file_level)
        handler.setFormatter(
            JSONFormatter() if json_logs
            else logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(correlation_id)s - %(message)s')
        )
        get_logger(stream).addHandler(handler)

    _configured = True

    get_logger(LogStream.SYSTEM).info(
        "Logging initialized",
        extra={"log_dir": str(log_dir), "log_level": log_level, "json_logs": json_logs}
    )


def get_logger(stream: str) -> logging.Logger:
    """Logger for a LogStream ("algohost.<stream>")."""
    return logging.getLogger(f"{ROOT_LOGGER}.{stream}")


# ============================================================================
# TIMING
# ============================================================================

def log_performance(stream: str = LogStream.SYSTEM):
    """
    Log duration of each call on *stream* (DEBUG on success, ERROR on failure).

    Usage:
        @log_performance(LogStream.SETUP)
        def create_algorithm_instance(self, artifact):
            ...
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            logger = get_logger(stream)
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.error(
                    f"{func.__name__} failed",
                    extra={
                        "function": func.__name__,
                        "duration_ms": round((time.perf_counter() - start) * 1000, 2),
                        "success": False,
                        "error": str(e),
                        "error_type": type(e).__name__,
                    }
                )
                raise

            logger.debug(
                f"{func.__name__} completed",
                extra={
                    "function": func.__name__,
                    "duration_ms": round((time.perf_counter() - start) * 1000, 2),
                    "success": True,
                }
            )
            return result

        return wrapper
    return decorator
