# -*- coding: utf-8 -*-
"""App database — SQLite helpers for the record store."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator


def connect(db_path: Path) -> sqlite3.Connection:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    # Autocommit mode: writers open explicit BEGIN IMMEDIATE transactions.
    conn = sqlite3.connect(str(db_path), check_same_thread=False, isolation_level=None)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA busy_timeout = 5000;")
    return conn


def init_app_db(db_path: Path) -> None:
    conn = connect(db_path)
    try:
        conn.execute("PRAGMA journal_mode = WAL;")
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS health_records (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                id TEXT NOT NULL UNIQUE,
                owner TEXT NOT NULL,
                title TEXT NOT NULL,
                record_type TEXT NOT NULL,
                date INTEGER NOT NULL,
                encrypted_url TEXT NOT NULL,
                file_size INTEGER,
                created_at INTEGER NOT NULL
            );
            """
        )
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_health_records_owner_seq ON health_records(owner, seq ASC);"
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS record_id_sequence (
                name TEXT PRIMARY KEY,
                last_value INTEGER NOT NULL
            );
            """
        )
        conn.execute(
            "INSERT OR IGNORE INTO record_id_sequence (name, last_value) VALUES ('health_records', 0);"
        )
    finally:
        conn.close()


@contextmanager
def db_conn(db_path: Path) -> Iterator[sqlite3.Connection]:
    conn = connect(db_path)
    try:
        yield conn
    finally:
        conn.close()


@contextmanager
def write_txn(db_path: Path) -> Iterator[sqlite3.Connection]:
    """Run the block inside one BEGIN IMMEDIATE transaction; roll back on error."""
    conn = connect(db_path)
    try:
        conn.execute("BEGIN IMMEDIATE;")
        try:
            yield conn
        except BaseException:
            conn.execute("ROLLBACK;")
            raise
        conn.execute("COMMIT;")
    finally:
        conn.close()


@contextmanager
def read_txn(db_path: Path) -> Iterator[sqlite3.Connection]:
    """Run several SELECTs against one snapshot (WAL keeps it stable until COMMIT)."""
    conn = connect(db_path)
    try:
        conn.execute("BEGIN;")
        try:
            yield conn
        finally:
            conn.execute("COMMIT;")
    finally:
        conn.close()
