# -*- coding: utf-8 -*-
"""Health records — owner-partitioned SQLite storage.

Every query in this module is scoped by ``owner``; nothing outside it reads the
``health_records`` table. Mutations are serialized by one store-wide lock and
each runs in a single BEGIN IMMEDIATE transaction. Reads use their own
connection and one SELECT, so they see a committed snapshot; ``snapshot``
reads count and listing inside one read transaction.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from ..app_db import db_conn, init_app_db, read_txn, write_txn
from .errors import StoreInvariantViolation
from .ids import IdGenerator
from .models import HealthRecord

logger = logging.getLogger(__name__)

_COLUMNS = "id, title, record_type, date, encrypted_url, file_size, created_at"


def _row_to_record(row: sqlite3.Row) -> HealthRecord:
    return HealthRecord(
        id=row["id"],
        title=row["title"],
        record_type=row["record_type"],
        date=int(row["date"]),
        encrypted_url=row["encrypted_url"],
        file_size=row["file_size"],
        created_at=int(row["created_at"]),
    )


class RecordStore:
    def __init__(self, db_path: Path, ids: Optional[IdGenerator] = None) -> None:
        self.db_path = db_path
        self.ids = ids or IdGenerator()
        self._write_lock = threading.Lock()

    def init(self) -> None:
        init_app_db(self.db_path)
        with db_conn(self.db_path) as conn:
            last = self.ids.peek(conn)
        logger.info("Record store ready at %s (last id counter: %d)", self.db_path, last)

    # ---- writes ----

    def _insert_row(self, conn: sqlite3.Connection, owner: str, record: HealthRecord) -> None:
        try:
            conn.execute(
                f"INSERT INTO health_records (owner, {_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    owner,
                    record.id,
                    record.title,
                    record.record_type,
                    record.date,
                    record.encrypted_url,
                    record.file_size,
                    record.created_at,
                ),
            )
        except sqlite3.IntegrityError as exc:
            logger.error("Duplicate record id %s (owner=%s)", record.id, owner)
            raise StoreInvariantViolation(f"record id {record.id!r} already exists") from exc

    def insert(self, owner: str, record: HealthRecord) -> None:
        with self._write_lock, write_txn(self.db_path) as conn:
            self._insert_row(conn, owner, record)
            self.ids.reserve(conn, record.id)

    def add(self, owner: str, build: Callable[[str], HealthRecord]) -> HealthRecord:
        """Allocate an id and insert ``build(id)`` in one transaction."""
        with self._write_lock, write_txn(self.db_path) as conn:
            record_id = self.ids.next_id(conn)
            record = build(record_id)
            if record.id != record_id:
                raise StoreInvariantViolation(f"built record carries id {record.id!r}, expected {record_id!r}")
            self._insert_row(conn, owner, record)
        return record

    def delete(self, owner: str, record_id: str) -> bool:
        with self._write_lock, write_txn(self.db_path) as conn:
            cur = conn.execute(
                "DELETE FROM health_records WHERE id = ? AND owner = ?",
                (record_id, owner),
            )
            return cur.rowcount > 0

    # ---- reads ----

    def list(self, owner: str) -> List[HealthRecord]:
        with db_conn(self.db_path) as conn:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM health_records WHERE owner = ? ORDER BY seq ASC",
                (owner,),
            ).fetchall()
        return [_row_to_record(r) for r in rows]

    def get(self, owner: str, record_id: str) -> Optional[HealthRecord]:
        with db_conn(self.db_path) as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM health_records WHERE id = ? AND owner = ?",
                (record_id, owner),
            ).fetchone()
        return _row_to_record(row) if row else None

    def count(self, owner: str) -> int:
        with db_conn(self.db_path) as conn:
            row = conn.execute(
                "SELECT COUNT(*) AS n FROM health_records WHERE owner = ?",
                (owner,),
            ).fetchone()
        return int(row["n"])

    def snapshot(self, owner: str) -> Tuple[int, List[HealthRecord]]:
        """Count and listing for ``owner`` read from one committed state."""
        with read_txn(self.db_path) as conn:
            row = conn.execute(
                "SELECT COUNT(*) AS n FROM health_records WHERE owner = ?",
                (owner,),
            ).fetchone()
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM health_records WHERE owner = ? ORDER BY seq ASC",
                (owner,),
            ).fetchall()
        return int(row["n"]), [_row_to_record(r) for r in rows]
