# -*- coding: utf-8 -*-
"""Health records — error hierarchy.

Caller mistakes (validation, not-found) are recovered inside the service and
surface as ``success=false`` envelopes. Store defects (id collision, exhausted
or corrupt counter) propagate to the app-level handler and answer HTTP 500.
"""

from __future__ import annotations


class RecordError(Exception):
    """Base exception for record store / service failures."""

    code = "RECORD_ERROR"
    http_status = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_response(self) -> dict:
        return {"error": {"code": self.code, "message": self.message}}


class RecordValidationError(RecordError):
    """Malformed add request (blank required field)."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: str) -> None:
        super().__init__(message)
        self.field = field


class RecordNotFound(RecordError):
    """Record id is unknown or owned by another principal; the two are indistinguishable."""

    code = "RECORD_NOT_FOUND"

    def __init__(self, record_id: str) -> None:
        super().__init__("Record not found or access denied")
        self.record_id = record_id


class StoreInvariantViolation(RecordError):
    """The store is in a state it must never reach (duplicate id, broken counter)."""

    code = "STORE_INVARIANT_VIOLATION"
    http_status = 500


class IdExhaustedError(StoreInvariantViolation):
    code = "ID_SPACE_EXHAUSTED"
