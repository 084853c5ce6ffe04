"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger
from payplan_gateway.config import settings


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


def log_plan_generated(
    request_id: str,
    order_id: str,
    total_cents: int,
    installment_count: int,
    down_payment_cents: int,
    duration_ms: float,
) -> None:
    """Log structured order plan outcome for analysis"""
    logging.info(
        "Order plan generated",
        extra={
            "request_id": request_id,
            "order_id": order_id,
            "step": "order_plan_complete",
            "total_cents": total_cents,
            "installment_count": installment_count,
            "down_payment_cents": down_payment_cents,
            "duration_ms": duration_ms,
        },
    )


def log_recurring_run(
    request_id: str,
    expenses_processed: int,
    generated: int,
    removed: int,
    duration_ms: float,
) -> None:
    """Log one recurring installment generation run"""
    logging.info(
        "Recurring installments generated",
        extra={
            "request_id": request_id,
            "step": "recurring_generation_complete",
            "expenses_processed": expenses_processed,
            "generated": generated,
            "removed": removed,
            "duration_ms": duration_ms,
        },
    )
