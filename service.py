# service.py

import datetime as dt
import io
import logging
import time

from errors import (InvalidAnswerError, MalformedEventError,
                    RecordNotFoundError, StatusTransitionError)
from exports import report_file_name, write_pdf_bytes
from report import build_replacements, format_report_date
from scoring import out_of_range_answers, process_assessment, require_complete
from store import (COMPLETED, CREATED, PAID, PAYMENT_CANCELED, PAYMENT_FAILED,
                   PAYMENT_PENDING, PROCESSING)
from webhooks import PAYMENT_EVENT_STATUS

logger = logging.getLogger(__name__)

REPORT_TASK = "report_generation"

# Once paid, a record never moves back because of a late or repeated event.
_SETTLED = {PAID, PROCESSING, COMPLETED}
_FAILED = {PAYMENT_FAILED, PAYMENT_CANCELED}


def start_checkout(store, client_name, client_email, payment_intent_id):
    """Create a readiness check waiting for the gateway to confirm payment."""
    record = store.create(client_name, client_email)
    store.update(record["id"], payment_intent_id=payment_intent_id)
    return store.set_status(record["id"], PAYMENT_PENDING)


def _event_record_id(store, obj):
    record_id = (obj.get("metadata") or {}).get("readiness_check_id")
    if record_id:
        return record_id
    record = store.find_by_payment(obj.get("payment_intent") or obj.get("id"))
    return record["id"] if record else None


def handle_payment_event(store, log, event):
    """
    Apply a payment gateway event to its readiness check.

    Events may arrive twice or out of order: repeats are no-ops and a failure
    arriving after payment is ignored. Returns the updated record, or None
    when the event type does not change status.

    Raises:
        MalformedEventError: if the payload has no type or object.
        RecordNotFoundError: if no readiness check matches the event.
    """
    started = time.perf_counter()
    if not isinstance(event, dict):
        event = {}
    event_type = event.get("type")
    event_id = event.get("id", "unknown")
    data = event.get("data")
    obj = data.get("object") if isinstance(data, dict) else None

    def _elapsed():
        return round((time.perf_counter() - started) * 1000, 2)

    if not isinstance(event_type, str) or not event_type or not isinstance(obj, dict):
        log.log_event(str(event_type or "unknown"), event_id, _elapsed(), "error", "malformed event")
        raise MalformedEventError("Webhook event must have a type and data.object")

    target = PAYMENT_EVENT_STATUS.get(event_type)
    if target is None:
        logger.info("unhandled payment event type=%s id=%s", event_type, event_id)
        log.log_event(event_type, event_id, _elapsed(), "success", metadata={"ignored": True})
        return None

    record_id = _event_record_id(store, obj)
    try:
        if record_id is None:
            raise RecordNotFoundError(obj.get("id"))
        record = store.get(record_id)
        current = record["status"]
        if current in _SETTLED or (target in _FAILED and current in _FAILED):
            logger.info(
                "ignoring %s for readiness check id=%s in status %s",
                event_type, record_id, current,
            )
        else:
            payment_intent = obj.get("payment_intent") or obj.get("id")
            if payment_intent and not record["payment_intent_id"]:
                store.update(record_id, payment_intent_id=payment_intent)
            record = store.set_status(record_id, target)
    except (RecordNotFoundError, StatusTransitionError) as exc:
        log.log_event(event_type, event_id, _elapsed(), "error", str(exc))
        raise

    log.log_event(
        event_type, event_id, _elapsed(), "success",
        metadata={"readiness_check_id": record_id, "status": record["status"]},
    )
    return record


def validate_submission(answers):
    """Raise IncompleteAnswersError or InvalidAnswerError for an unusable answer set."""
    require_complete(answers)
    invalid = out_of_range_answers(answers)
    if invalid:
        raise InvalidAnswerError(invalid)


def submit_answers(store, record_id, answers, require_paid=True):
    """
    Score a readiness check's answers and store the assessment data.

    Incomplete or out-of-range answers are rejected before scoring. The
    record must be paid (or just created when require_paid is False);
    resubmitting for a record already in processing rescores it.

    Returns:
        dict: the assessment_data payload
    """
    validate_submission(answers)

    record = store.get(record_id)
    allowed = {PAID, PROCESSING} if require_paid else {CREATED, PAID, PROCESSING}
    if record["status"] not in allowed:
        raise StatusTransitionError(record["status"], PROCESSING)

    data = process_assessment(answers)
    store.update(record_id, assessment_data=data)
    if record["status"] == CREATED:
        store.set_status(record_id, PAID)
    store.set_status(record_id, PROCESSING)
    logger.info(
        "scored readiness check id=%s weighted=%s label=%s",
        record_id, data["weighted_score"], data["overall_label"],
    )
    return data


def generate_report(store, record_id, report_date=None, include_charts=True):
    """
    Render the report for a scored readiness check and mark it completed.

    Regenerating a completed report replaces the stored file.
    """
    record = store.get(record_id)
    if record["status"] not in (PROCESSING, COMPLETED):
        raise StatusTransitionError(record["status"], COMPLETED)

    report_date = report_date or dt.date.today()
    date_text = format_report_date(report_date)
    content = build_replacements(record["assessment_data"], record["client_name"], date_text)

    buf = io.BytesIO()
    write_pdf_bytes(
        buf, record["assessment_data"], record["client_name"], date_text,
        include_charts=include_charts,
    )
    store.update(
        record_id,
        report=buf.getvalue(),
        report_name=report_file_name(record["client_name"], report_date),
        report_content=content,
    )
    record = store.set_status(record_id, COMPLETED)
    logger.info("report ready for readiness check id=%s", record_id)
    return record


def enqueue_report(queue, store, record_id, include_charts=True):
    """Queue report generation for a scored readiness check."""
    queue.register(
        REPORT_TASK,
        lambda payload: generate_report(
            store, payload["record_id"], include_charts=payload["include_charts"]
        ),
    )
    return queue.submit(REPORT_TASK, {"record_id": record_id, "include_charts": include_charts})
