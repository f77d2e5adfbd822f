"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from sales_gateway.config import settings


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

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def log_submission(
    request_id: str,
    cpf: str,
    outcome: str,
    created: bool,
    duration_ms: float,
    reason: str = "",
) -> None:
    """Log structured submission outcome for analysis"""
    logging.info(
        "Submission completed",
        extra={
            "request_id": request_id,
            "cpf": cpf,
            "step": "submission_complete",
            "outcome": outcome,
            "destination": "create" if created else "update",
            "reason": reason,
            "duration_ms": duration_ms,
        },
    )


def log_status_change(cpf: str, status: str, trigger: str, records_updated: int) -> None:
    """Log an eligibility change applied to every record of one client"""
    logging.info(
        "Client status changed",
        extra={
            "cpf": cpf,
            "step": "status_change",
            "trigger": trigger,
            "status": status,
            "records_updated": records_updated,
        },
    )
