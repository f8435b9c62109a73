"""
JSON log output for equityvest.

Module loggers stay plain ``logging.getLogger(__name__)`` and pass structured
fields through ``extra`` (always including a dotted ``event`` name). This
module only decides where those records go and how they are rendered:
one JSON object per line, tagged with the deployment environment.

    from equityvest.core.logging_config import setup_logging

    setup_logging(level="DEBUG", environment="development")
"""

import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Dict, Any
from pythonjsonlogger import jsonlogger

LOG_FORMAT = "%(timestamp)s %(level)s %(name)s %(message)s"
ROTATE_BYTES = 50 * 1024 * 1024
ROTATE_KEEP = 5


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Renders records as JSON with environment, service and call-site fields."""

    def __init__(self, environment: str = "production", service_name: str = "equityvest"):
        super().__init__(fmt=LOG_FORMAT)
        self.environment = environment
        self.service_name = service_name

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = log_record.get("timestamp") or datetime.fromtimestamp(
            record.created, timezone.utc
        ).isoformat()
        log_record["level"] = log_record.get("level") or record.levelname.lower()
        log_record["environment"] = self.environment
        log_record["service"] = self.service_name
        log_record["source"] = {
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }


def setup_logging(
    name: str = "equityvest",
    log_file: Optional[str] = None,
    level: str = "INFO",
    environment: str = "production",
    enable_console: bool = True,
) -> logging.Logger:
    """
    Attach JSON handlers to the ``name`` logger, replacing any it already has.

    Console output goes to stdout; ``log_file`` adds a size-rotated file.
    A file that cannot be opened is reported and skipped rather than
    stopping startup.
    """
    numeric_level = getattr(logging, level.upper())
    logger = logging.getLogger(name)
    logger.setLevel(numeric_level)
    logger.handlers = []

    formatter = CustomJsonFormatter(environment=environment, service_name=name.split(".")[0])
    handlers = []
    if enable_console:
        handlers.append(logging.StreamHandler(sys.stdout))
    if log_file:
        try:
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)
            handlers.append(
                logging.handlers.RotatingFileHandler(
                    log_file, maxBytes=ROTATE_BYTES, backupCount=ROTATE_KEEP
                )
            )
        except OSError as exc:
            logger.warning(
                "Log file unavailable: %s",
                exc,
                extra={"event": "logging.file_unavailable", "path": log_file},
            )

    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger
