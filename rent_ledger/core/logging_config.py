"""
Logging setup for the rent ledger service.

Every module logs through ``logging.getLogger(__name__)``; this module
configures the ``rent_ledger`` logger tree once at startup.
"""

import logging
import sys
from datetime import datetime
from typing import Any

from pythonjsonlogger.json import JsonFormatter

ROOT_LOGGER_NAME = "rent_ledger"


class StructuredFormatter(JsonFormatter):
    """JSON formatter that adds standard fields for log shipping."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.now().astimezone().isoformat()
        log_record["level"] = record.levelname
        log_record["logger_name"] = record.name
        log_record["function"] = record.funcName
        log_record["line"] = record.lineno

        for field in ["msg", "args", "created", "msecs", "relativeCreated", "pathname"]:
            log_record.pop(field, None)


def setup_logging(log_level: str = "INFO", log_format: str = "json") -> logging.Logger:
    """
    Configure the application logger.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR
        log_format: "json" for structured output, anything else for plain text

    Returns:
        The configured ``rent_ledger`` logger
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers = []

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    if log_format.lower() == "json":
        handler.setFormatter(StructuredFormatter("%(timestamp)s %(level)s %(name)s %(message)s"))
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
        )
    logger.addHandler(handler)
    logger.propagate = False

    # Quiet noisy libraries
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
    logging.getLogger("uvicorn").setLevel(logging.INFO)

    return logger
