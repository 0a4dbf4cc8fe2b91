"""Tests for the webhook event log."""

import pytest

from webhooks import WebhookLog


def test_ring_buffer_keeps_latest():
    log = WebhookLog(max_logs=3)
    for n in range(5):
        log.log_event("payment_intent.succeeded", f"evt_{n}", 10, "success")
    assert len(log) == 3
    assert [e["event_id"] for e in log.recent()] == ["evt_2", "evt_3", "evt_4"]
    assert [e["event_id"] for e in log.recent(2)] == ["evt_3", "evt_4"]


def test_by_status(webhook_log):
    webhook_log.log_event("a", "1", 5, "success")
    webhook_log.log_event("b", "2", 5, "error", "bad signature")
    webhook_log.log_event("c", "3", 5, "timeout")
    [err] = webhook_log.by_status("error")
    assert err["error_message"] == "bad signature"


def test_performance_stats(webhook_log):
    webhook_log.log_event("a", "1", 10, "success")
    webhook_log.log_event("a", "2", 20, "success")
    webhook_log.log_event("a", "3", 31, "error")
    stats = webhook_log.performance_stats()
    assert stats == {
        "total_events": 3,
        "success_rate": 66.67,
        "average_processing_ms": 20.33,
        "error_count": 1,
        "timeout_count": 0,
    }


def test_performance_stats_empty(webhook_log):
    assert webhook_log.performance_stats()["total_events"] == 0
    assert webhook_log.recent() == []


def test_unknown_status_rejected(webhook_log):
    with pytest.raises(ValueError):
        webhook_log.log_event("a", "1", 1, "maybe")
