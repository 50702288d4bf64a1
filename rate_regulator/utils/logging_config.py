"""Root logger setup for the ``rate-regulator`` command.

Logs always go to the console. A rotating log file is added only when a
directory is given, since the library itself keeps no state on disk.
"""
import json
import logging
import os
import time
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Optional


LOG_FILENAME = "rate_regulator.log"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S%z"
MAX_LOG_BYTES = 5 * 1024 * 1024
LOG_BACKUPS = 5


class JsonFormatter(logging.Formatter):
    """Render each record as one JSON object per line, timestamps in UTC."""

    def format(self, record):
        payload = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def _build_formatter(json_logs: bool) -> logging.Formatter:
    if json_logs:
        return JsonFormatter()
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT)
    formatter.converter = time.gmtime
    return formatter


def setup_logging(
    level: str = "INFO", log_dir: Optional[str] = None, json_logs: bool = False
) -> Optional[str]:
    """Replace the root handlers with a console and an optional file handler.

    Returns the log file path, or ``None`` when logging to the console only.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for handler in list(root.handlers):
        root.removeHandler(handler)

    formatter = _build_formatter(json_logs)
    handlers = [logging.StreamHandler()]
    log_path = None
    if log_dir is not None:
        os.makedirs(log_dir, exist_ok=True)
        log_path = os.path.join(log_dir, LOG_FILENAME)
        handlers.append(
            RotatingFileHandler(log_path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS)
        )

    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    return log_path
