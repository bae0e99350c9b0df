"""
Logging setup for the ambassador panel API.

Console output stays human-readable; the two rotating files carry one JSON
object per line so ledger events can be filtered by ambassador or order:
- ambassadors.log: everything from DEBUG up
- errors.log: ERROR and above only
"""

import logging
import logging.handlers
import json
from datetime import datetime, timezone
from pathlib import Path

from panel.config import settings

# Attributes passed through `extra=` that end up in the JSON records
EXTRA_FIELDS = (
    "ambassador_id",
    "order_id",
    "code",
    "method",
    "path",
    "status",
    "duration",
)

# Libraries that log every request or statement at INFO
QUIET_LOGGERS = (
    "aiogram",
    "aiohttp.access",
    "aiohttp.server",
    "aiohttp.web",
    "asyncio",
    "sqlalchemy.engine",
    "sqlalchemy.pool",
)

MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5


class JSONFormatter(logging.Formatter):
    """One JSON object per record, ledger context fields included."""
    
    def format(self, record):
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        
        for field in EXTRA_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)
        
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        
        return json.dumps(log_data, ensure_ascii=False, default=str)


def _json_file_handler(path: Path, level: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUPS,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter())
    return handler


def setup_logging(log_dir: str | Path | None = None):
    """
    Configure the root logger for the API process.
    
    Replaces any handlers already installed, so calling it twice does not
    duplicate output.
    """
    log_dir = Path(log_dir or settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.log_level.upper()))
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)-7s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    ))
    root_logger.addHandler(console_handler)
    root_logger.addHandler(_json_file_handler(log_dir / "ambassadors.log", logging.DEBUG))
    root_logger.addHandler(_json_file_handler(log_dir / "errors.log", logging.ERROR))
    
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    
    logging.getLogger(__name__).info(
        f"Ambassador panel logging ready ({settings.environment}, level {settings.log_level}, "
        f"files in {log_dir.absolute()})"
    )
