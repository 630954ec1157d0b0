"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from payments_dashboard.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_fetch_cycle(
    direction: str,
    page: int,
    total_items: int,
    status: str,
    duration_ms: float,
    error: str | None = None,
) -> None:
    """Log structured outcome of one payments fetch cycle"""
    logging.getLogger("payments_dashboard.view").info(
        "Fetch cycle completed",
        extra={
            "step": "fetch_cycle_complete",
            "direction": direction,
            "page": page,
            "total_items": total_items,
            "status": status,
            "duration_ms": duration_ms,
            "error": error,
        },
    )
