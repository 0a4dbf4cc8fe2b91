"""Errors raised by the readiness check."""


class AssessmentError(Exception):
    """Base class for readiness check errors."""


class ConfigurationError(AssessmentError):
    """The static category/question tables are inconsistent."""


class IncompleteAnswersError(AssessmentError):
    def __init__(self, missing):
        self.missing = list(missing)
        super().__init__("All questions must be answered")


class InvalidAnswerError(AssessmentError):
    def __init__(self, invalid):
        self.invalid = list(invalid)
        super().__init__(
            "Answers outside the allowed options: " + ", ".join(self.invalid)
        )


class ReportDataError(AssessmentError):
    """Assessment data cannot be turned into report content."""


class RecordNotFoundError(AssessmentError):
    def __init__(self, record_id):
        self.record_id = record_id
        super().__init__(f"Readiness check not found: {record_id}")


class StatusTransitionError(AssessmentError):
    def __init__(self, current, requested):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move readiness check from {current} to {requested}")


class QueueFullError(AssessmentError):
    """The background task queue is at capacity."""


class MalformedEventError(AssessmentError):
    """A payment webhook payload is missing its type or object."""
