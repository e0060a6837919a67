"""
errors.py — Failure kinds shared by the services and the HTTP layer.
"""


class StudyTrackerError(Exception):
    """Base class for every error raised by this package."""


class PersistenceFailure(StudyTrackerError):
    """A read or write against the remote store failed (network, validation, permission)."""

    retryable = True

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
