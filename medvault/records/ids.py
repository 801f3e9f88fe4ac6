# -*- coding: utf-8 -*-
"""Health records — record id allocation.

Ids come from a monotonic counter stored in ``record_id_sequence`` inside the
same SQLite file as the records. ``next_id`` must run on a connection that
already holds the write transaction of the insert that will use the id, so an
id is consumed atomically with its record and is never handed out twice, even
across restarts or after the record is deleted.
"""

from __future__ import annotations

import re
import sqlite3
from typing import Optional

from .errors import IdExhaustedError, StoreInvariantViolation

ID_PREFIX = "rec_"
SEQUENCE_NAME = "health_records"
# SQLite INTEGER is a signed 64-bit value.
MAX_COUNTER = 2**63 - 1


def format_id(value: int) -> str:
    # Fixed width keeps lexical order equal to allocation order.
    return f"{ID_PREFIX}{value:016x}"


_COUNTER_ID_RE = re.compile(r"^" + re.escape(ID_PREFIX) + r"([0-9a-f]{16})$")


def parse_id(record_id: str) -> Optional[int]:
    """Counter value encoded in ``record_id``, or None when it is not counter-shaped."""
    match = _COUNTER_ID_RE.match(record_id)
    return int(match.group(1), 16) if match else None


class IdGenerator:
    def __init__(self, sequence_name: str = SEQUENCE_NAME, max_value: int = MAX_COUNTER) -> None:
        self.sequence_name = sequence_name
        self.max_value = max_value

    def peek(self, conn: sqlite3.Connection) -> int:
        """Last allocated counter value (0 before the first allocation)."""
        row = conn.execute(
            "SELECT last_value FROM record_id_sequence WHERE name = ?",
            (self.sequence_name,),
        ).fetchone()
        if row is None:
            raise StoreInvariantViolation(f"id sequence {self.sequence_name!r} is missing")
        return int(row["last_value"])

    def next_id(self, conn: sqlite3.Connection) -> str:
        if not conn.in_transaction:
            raise StoreInvariantViolation("next_id called outside a write transaction")
        last = self.peek(conn)
        if last >= self.max_value:
            raise IdExhaustedError(f"id sequence {self.sequence_name!r} exhausted at {last}")
        value = last + 1
        conn.execute(
            "UPDATE record_id_sequence SET last_value = ? WHERE name = ?",
            (value, self.sequence_name),
        )
        return format_id(value)

    def reserve(self, conn: sqlite3.Connection, record_id: str) -> None:
        """Advance the counter past ``record_id`` when it looks like one of ours.

        Keeps ids inserted from outside the allocator (imports, restores) from
        being handed out again by ``next_id``.
        """
        if not conn.in_transaction:
            raise StoreInvariantViolation("reserve called outside a write transaction")
        value = parse_id(record_id)
        # Values past the counter range can never be allocated.
        if value is None or value > self.max_value:
            return
        if value > self.peek(conn):
            conn.execute(
                "UPDATE record_id_sequence SET last_value = ? WHERE name = ?",
                (value, self.sequence_name),
            )
