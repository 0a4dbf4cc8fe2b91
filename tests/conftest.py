"""Pytest configuration and fixtures."""

import pytest

from scoring import process_assessment
from store import AssessmentStore
from tasks import TaskQueue
from webhooks import WebhookLog

LOW_RISK = {
    "roles_ownership": 0,
    "policies": 0,
    "sensitive_data": 0,
    "data_geography": 0,
    "access_controls": 0,
    "protection_logs": 0,
    "providers": 1,
    "contracts": 0,
    "human_in_loop": 0,
    "rollback_incidents": 0,
    "user_disclosure": 0,
    "record_keeping": 0,
}


def make_answers(**overrides):
    answers = dict(LOW_RISK)
    answers.update(overrides)
    return answers


@pytest.fixture
def low_answers():
    return make_answers()


@pytest.fixture
def high_answers():
    return {qid: 3 for qid in LOW_RISK}


@pytest.fixture
def low_data(low_answers):
    return process_assessment(low_answers)


@pytest.fixture
def high_data(high_answers):
    return process_assessment(high_answers)


@pytest.fixture
def store():
    return AssessmentStore()


@pytest.fixture
def webhook_log():
    return WebhookLog(max_logs=10)


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def queue(sleeps):
    return TaskQueue(max_size=5, max_retries=3, backoff_base=1.0, sleep=sleeps.append)
