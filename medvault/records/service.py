# -*- coding: utf-8 -*-
"""Health records — operation surface.

Every operation takes the already-resolved caller principal. Caller mistakes
come back as ``Err`` results; store defects raise and are left to the app-level
error handler.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from ..identity.models import ANONYMOUS_PRINCIPAL, is_anonymous
from .errors import RecordNotFound, RecordValidationError
from .models import AddRecordRequest, HealthRecord
from .result import Err, Ok, Result
from .storage import RecordStore

logger = logging.getLogger(__name__)

HEALTH_CHECK_MESSAGE = "Health Records Backend is running"

_AUTH_REQUIRED = "Authentication required"


def _utc_now_seconds() -> int:
    return int(time.time())


def validate_add_request(request: AddRecordRequest) -> None:
    if not request.title.strip():
        raise RecordValidationError("Title cannot be empty", field="title")
    if not request.record_type.strip():
        raise RecordValidationError("Record type cannot be empty", field="record_type")


class RecordService:
    def __init__(self, store: RecordStore, clock: Optional[Callable[[], int]] = None) -> None:
        self.store = store
        self.clock = clock or _utc_now_seconds

    def add_record(self, principal: str, request: AddRecordRequest) -> Result:
        if is_anonymous(principal):
            return Err("Anonymous users cannot add records")
        try:
            validate_add_request(request)
        except RecordValidationError as exc:
            logger.info("Rejected add_record from %s (%s): %s", principal, exc.field, exc.message)
            return Err(exc.message)

        created_at = int(self.clock())
        record_date = request.date if request.date is not None else created_at

        def build(record_id: str) -> HealthRecord:
            return HealthRecord(
                id=record_id,
                title=request.title.strip(),
                record_type=request.record_type.strip(),
                date=record_date,
                encrypted_url=request.encrypted_url,
                file_size=request.file_size,
                created_at=created_at,
            )

        record = self.store.add(principal, build)
        logger.info("Added record %s for %s", record.id, principal)
        return Ok("Record added successfully", [record])

    def get_my_records(self, principal: str) -> Result:
        if is_anonymous(principal):
            return Err(_AUTH_REQUIRED)
        records = self.store.list(principal)
        return Ok(f"Found {len(records)} records", records)

    def require_owned(self, principal: str, record_id: str) -> HealthRecord:
        record = self.store.get(principal, record_id)
        if record is None:
            raise RecordNotFound(record_id)
        return record

    def get_record_by_id(self, principal: str, record_id: str) -> Result:
        if is_anonymous(principal):
            return Err(_AUTH_REQUIRED)
        try:
            record = self.require_owned(principal, record_id)
        except RecordNotFound as exc:
            return Err(exc.message)
        return Ok("Record found", [record])

    def delete_record(self, principal: str, record_id: str) -> Result:
        if is_anonymous(principal):
            return Err(_AUTH_REQUIRED)
        if not self.store.delete(principal, record_id):
            return Err(RecordNotFound(record_id).message)
        logger.info("Deleted record %s for %s", record_id, principal)
        return Ok("Record deleted successfully")

    def get_record_count(self, principal: str) -> int:
        if is_anonymous(principal):
            return 0
        return self.store.count(principal)

    @staticmethod
    def health_check() -> str:
        return HEALTH_CHECK_MESSAGE

    @staticmethod
    def whoami(principal: Optional[str]) -> str:
        return principal or ANONYMOUS_PRINCIPAL
