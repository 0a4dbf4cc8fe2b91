# webhooks.py

import collections
import datetime as dt
import itertools
import json
import logging

from config import WEBHOOK_LOG_SIZE
from store import PAID, PAYMENT_CANCELED, PAYMENT_FAILED

logger = logging.getLogger(__name__)

# Payment gateway event type -> readiness check status. Types not listed are logged only.
PAYMENT_EVENT_STATUS = {
    "checkout.session.completed": PAID,
    "payment_intent.succeeded": PAID,
    "payment_intent.payment_failed": PAYMENT_FAILED,
    "payment_intent.canceled": PAYMENT_CANCELED,
}

LOG_STATUSES = ("success", "error", "timeout")


class WebhookLog:
    """Ring buffer of the most recent webhook deliveries."""

    def __init__(self, max_logs=WEBHOOK_LOG_SIZE):
        self._logs = collections.deque(maxlen=max_logs)
        self._ids = itertools.count(1)

    def log_event(
        self,
        event_type,
        event_id,
        processing_ms,
        status,
        error_message=None,
        metadata=None,
    ):
        if status not in LOG_STATUSES:
            raise ValueError(f"unknown webhook log status: {status}")
        entry = {
            "id": f"log_{next(self._ids)}",
            "timestamp": dt.datetime.now(dt.timezone.utc).isoformat(),
            "event_type": event_type,
            "event_id": event_id,
            "processing_ms": processing_ms,
            "status": status,
            "error_message": error_message,
            "metadata": metadata or {},
        }
        self._logs.append(entry)
        line = json.dumps({"webhook_log": entry}, default=str)
        if status == "success":
            logger.info(line)
        else:
            logger.error(line)
        return entry

    def recent(self, limit=50):
        return list(self._logs)[-limit:] if limit > 0 else []

    def by_status(self, status):
        return [e for e in self._logs if e["status"] == status]

    def performance_stats(self):
        total = len(self._logs)
        success = sum(1 for e in self._logs if e["status"] == "success")
        avg = sum(e["processing_ms"] for e in self._logs) / total if total else 0
        return {
            "total_events": total,
            "success_rate": round(success / total * 100, 2) if total else 0,
            "average_processing_ms": round(avg, 2),
            "error_count": len(self.by_status("error")),
            "timeout_count": len(self.by_status("timeout")),
        }

    def __len__(self):
        return len(self._logs)
