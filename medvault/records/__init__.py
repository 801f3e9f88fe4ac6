# -*- coding: utf-8 -*-
"""Health record metadata: owner-partitioned store, id allocation, operation surface."""

from .service import RecordService
from .storage import RecordStore

__all__ = ["RecordService", "RecordStore"]
