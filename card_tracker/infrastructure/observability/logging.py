"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

SERVICE_NAME = "card-tracker"

ledger_logger = logging.getLogger("card_tracker.ledger")
request_logger = logging.getLogger("card_tracker.request")


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def __init__(self, *args: Any, service_name: str = SERVICE_NAME, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.service_name = service_name

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = self.service_name


def setup_logging(level: str = "INFO", service_name: str = SERVICE_NAME) -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s",
        service_name=service_name,
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def _text(value: Any) -> str | None:
    return None if value is None else str(value)


def log_reconciliation(
    action: str,
    user_id: Any,
    card_id: Any,
    txn_type: str | None,
    amount: Decimal | None,
    new_balance: Decimal | None,
    rejected: str | None = None,
) -> None:
    """Log the outcome of a balance recompute (applied or rejected)"""
    extra = {
        "step": f"transaction_{action}",
        "user_id": _text(user_id),
        "card_id": _text(card_id),
        "transaction_type": txn_type,
        "amount": _text(amount),
        "new_balance": _text(new_balance),
    }
    if rejected:
        ledger_logger.warning("Balance change rejected", extra={**extra, "reason": rejected})
    else:
        ledger_logger.info("Balance reconciled", extra=extra)


def log_request(request_id: str, method: str, path: str, status: int, duration_ms: float) -> None:
    request_logger.info(
        "Request handled",
        extra={
            "request_id": request_id,
            "method": method,
            "path": path,
            "status": status,
            "duration_ms": round(duration_ms, 2),
        },
    )
