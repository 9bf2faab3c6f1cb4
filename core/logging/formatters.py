"""
Formatters for the host's log streams.

- JSONFormatter: one JSON object per line (rotating stream files)
- ConsoleFormatter: single-line, optionally colored (terminal)
"""

import json
import logging
import traceback
from datetime import datetime, timezone


# LogRecord attributes that are never reported as "extra"
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "correlation_id"}


def _stream_of(record: logging.LogRecord) -> str:
    """'algohost.setup' / 'algohost.algorithm.MyAlgo' -> 'setup' / 'algorithm'."""
    parts = record.name.split('.')
    return parts[1] if len(parts) > 1 and parts[0] == "algohost" else parts[-1]


class JSONFormatter(logging.Formatter):
    """
    Structured formatter.

    Keys: timestamp (UTC ISO-8601), level, logger, correlation_id, message,
    plus "extra" (caller-supplied fields), "exception" when exc_info is set
    and "source" for WARNING and above.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "correlation_id": getattr(record, 'correlation_id', None),
            "message": record.getMessage(),
        }

        extra = {
            key: value for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and not key.startswith('_')
        }
        if extra:
            payload["extra"] = extra

        if record.exc_info:
            exc_type, exc, tb = record.exc_info
            payload["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc),
                "traceback": traceback.format_exception(exc_type, exc, tb),
            }

        if record.levelno >= logging.WARNING:
            payload["source"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        return json.dumps(payload, default=str)


class ConsoleFormatter(logging.Formatter):
    """
    Terminal formatter.

    [2024-03-15 14:30:00] [INFO    ] [SETUP     ] [corr:buy-and-] BacktestNode job configured
    """

    RESET = '\033[0m'
    LEVEL_COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime('%Y-%m-%d %H:%M:%S')

        level = f"{record.levelname:8}"
        if self.use_colors:
            level = f"{self.LEVEL_COLORS.get(record.levelname, '')}{level}{self.RESET}"

        correlation_id = getattr(record, 'correlation_id', None)
        corr = f" [corr:{correlation_id[:8]}]" if correlation_id else ""

        line = f"[{timestamp}] [{level}] [{_stream_of(record).upper():10}]{corr} {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line
