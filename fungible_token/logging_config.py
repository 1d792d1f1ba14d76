"""
Structured Logging Configuration Module

Log records for token operations carry optional context fields (who acted,
what they did, on which resource). The JSON formatter writes one object per
line; the text format keeps plain lines for local runs.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional


TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Context attributes copied from a record into the JSON line when present
CONTEXT_FIELDS = ("correlation_id", "account_id", "action", "resource", "extra")


class JSONFormatter(logging.Formatter):
    """Render a record as one JSON object per line"""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "message": record.getMessage(),
        }
        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                entry[name] = value

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def setup_logging(
    level: str = "INFO",
    logger_name: str = "fungible_token",
    fmt: str = "json",
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Attach a single handler to the package logger.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        logger_name: Logger to configure
        fmt: "json" for structured output, "text" for plain lines
        log_file: Optional file path; stderr when None

    Returns:
        The configured logger
    """
    logger = logging.getLogger(logger_name)
    for existing in list(logger.handlers):
        logger.removeHandler(existing)

    handler = logging.FileHandler(log_file) if log_file else logging.StreamHandler()
    formatter = logging.Formatter(TEXT_FORMAT) if fmt == "text" else JSONFormatter()
    handler.setFormatter(formatter)

    logger.addHandler(handler)
    logger.setLevel(logging.getLevelName(level.upper()))
    # Records stop here so the root logger does not print them twice
    logger.propagate = False
    return logger


def get_logger(name: str = "fungible_token") -> logging.Logger:
    return logging.getLogger(name)


def log_action(logger: logging.Logger, level: str, message: str,
               account_id: Optional[str] = None, action: Optional[str] = None,
               resource: Optional[str] = None, correlation_id: Optional[str] = None,
               extra: Optional[dict] = None) -> None:
    """
    Log a token operation with its context fields.

    Empty context values are left off the record.
    """
    context = {
        "account_id": account_id,
        "action": action,
        "resource": resource,
        "correlation_id": correlation_id,
        "extra": extra,
    }
    logger.log(
        logging.getLevelName(level.upper()), message,
        extra={key: value for key, value in context.items() if value},
        stacklevel=2,
    )
