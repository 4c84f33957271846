"""Error taxonomy for engine operations."""

from __future__ import annotations


class ScorecardEngineError(Exception):
    """Base class for errors reported back to the caller."""

    code = "ENGINE_ERROR"
    status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict[str, str]:
        return {"error": self.message, "code": self.code}


class NotFoundError(ScorecardEngineError):
    """A token, job or candidate does not resolve."""

    code = "NOT_FOUND"
    status = 404


class StateConflictError(ScorecardEngineError):
    """The target record is in a state that forbids the operation."""

    code = "STATE_CONFLICT"
    status = 409


class AlreadySubmittedError(StateConflictError):
    code = "ALREADY_SUBMITTED"

    def __init__(self, message: str = "Test already submitted"):
        super().__init__(message)


class ExpiredLinkError(StateConflictError):
    code = "EXPIRED"
    status = 410

    def __init__(self, message: str = "Test link has expired"):
        super().__init__(message)


class SubmissionValidationError(ScorecardEngineError):
    """Request payload is missing a field or has a malformed shape."""

    code = "VALIDATION_ERROR"
    status = 400


class StoreError(ScorecardEngineError):
    """The record store could not be read or written.

    The message holds internal detail for server-side logs only; callers get
    :data:`GENERIC_FAILURE_MESSAGE` instead.
    """

    code = "STORE_ERROR"
    status = 500

    def to_payload(self) -> dict[str, str]:
        return {"error": GENERIC_FAILURE_MESSAGE, "code": self.code}


GENERIC_FAILURE_MESSAGE = "Internal error"


__all__ = [
    "AlreadySubmittedError",
    "ExpiredLinkError",
    "GENERIC_FAILURE_MESSAGE",
    "NotFoundError",
    "ScorecardEngineError",
    "StateConflictError",
    "StoreError",
    "SubmissionValidationError",
]
