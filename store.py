# store.py

import copy
import datetime as dt
import logging
import threading
import uuid

from errors import RecordNotFoundError, StatusTransitionError

logger = logging.getLogger(__name__)

CREATED = "created"
PAYMENT_PENDING = "payment_pending"
PAID = "paid"
PROCESSING = "processing"
COMPLETED = "completed"
PAYMENT_FAILED = "payment_failed"
PAYMENT_CANCELED = "payment_canceled"

# Allowed moves; re-applying the current status is always accepted.
TRANSITIONS = {
    CREATED: {PAYMENT_PENDING, PAID, PAYMENT_FAILED, PAYMENT_CANCELED},
    PAYMENT_PENDING: {PAID, PAYMENT_FAILED, PAYMENT_CANCELED},
    PAID: {PROCESSING},
    PROCESSING: {COMPLETED},
    COMPLETED: set(),
    PAYMENT_FAILED: set(),
    PAYMENT_CANCELED: set(),
}


def _now():
    return dt.datetime.now(dt.timezone.utc).isoformat()


class AssessmentStore:
    """
    In-memory readiness check records, keyed by id.

    Created once per process and dropped on restart. Records are plain dicts;
    get() hands out copies so callers cannot mutate stored state.
    """

    def __init__(self):
        self._records = {}
        self._lock = threading.Lock()

    def create(self, client_name, client_email=""):
        now = _now()
        record = {
            "id": uuid.uuid4().hex,
            "client_name": client_name or "Client",
            "client_email": client_email or "",
            "status": CREATED,
            "payment_intent_id": None,
            "assessment_data": None,
            "report": None,
            "report_name": None,
            "report_content": None,
            "created_at": now,
            "updated_at": now,
        }
        with self._lock:
            self._records[record["id"]] = record
        logger.info("created readiness check id=%s", record["id"])
        return copy.deepcopy(record)

    def get(self, record_id):
        with self._lock:
            if record_id not in self._records:
                raise RecordNotFoundError(record_id)
            return copy.deepcopy(self._records[record_id])

    def update(self, record_id, **fields):
        if "status" in fields:
            raise ValueError("use set_status() to change status")
        with self._lock:
            if record_id not in self._records:
                raise RecordNotFoundError(record_id)
            record = self._records[record_id]
            record.update(copy.deepcopy(fields))
            record["updated_at"] = _now()
            return copy.deepcopy(record)

    def set_status(self, record_id, status):
        with self._lock:
            if record_id not in self._records:
                raise RecordNotFoundError(record_id)
            record = self._records[record_id]
            current = record["status"]
            if status != current:
                if status not in TRANSITIONS.get(current, set()):
                    raise StatusTransitionError(current, status)
                record["status"] = status
                record["updated_at"] = _now()
                logger.info("readiness check id=%s status %s -> %s", record_id, current, status)
            return copy.deepcopy(record)

    def find_by_payment(self, payment_intent_id):
        with self._lock:
            for record in self._records.values():
                if payment_intent_id and record["payment_intent_id"] == payment_intent_id:
                    return copy.deepcopy(record)
        return None

    def __len__(self):
        with self._lock:
            return len(self._records)
