# -*- coding: utf-8 -*-
"""
Operator CLI for the health records store.

Usage:
    python -m medvault.cli token <principal> [--ttl-days N]
    python -m medvault.cli stats
    python -m medvault.cli list <principal>
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional


def _db_path(args: argparse.Namespace) -> Path:
    from .config import settings

    return Path(args.db_path) if args.db_path else settings.db_path


def cmd_token(args: argparse.Namespace) -> int:
    """Issue a bearer token naming a principal."""
    from .identity.security import create_access_token

    try:
        token = create_access_token(principal=args.principal, ttl_days=args.ttl_days)
    except ValueError as exc:
        print(f"Error: {exc}")
        return 1
    print(token)
    return 0


def cmd_stats(args: argparse.Namespace) -> int:
    """Show store location and id counter."""
    from .app_db import db_conn
    from .records.ids import IdGenerator

    db_path = _db_path(args)
    if not db_path.exists():
        print(f"Database path: {db_path} (not created)")
        return 0

    with db_conn(db_path) as conn:
        last = IdGenerator().peek(conn)
        row = conn.execute(
            "SELECT COUNT(*) AS n, COUNT(DISTINCT owner) AS owners FROM health_records"
        ).fetchone()

    print(f"Path: {db_path}")
    print(f"Records: {row['n']}")
    print(f"Owners: {row['owners']}")
    print(f"Last id counter: {last}")
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    """List a principal's records."""
    from .records.storage import RecordStore

    db_path = _db_path(args)
    if not db_path.exists():
        print(f"Error: Database not found: {db_path}")
        return 1

    count, records = RecordStore(db_path).snapshot(args.principal)
    if not records:
        print("No records.")
        return 0
    print(f"{count} records")
    for record in records:
        print(f"{record.id}  {record.record_type:<12} {record.title}  ({record.encrypted_url})")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Health records store CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--db-path",
        help="Path to the SQLite database (default: MEDVAULT_DB_PATH or data/medvault.db)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    token_parser = subparsers.add_parser("token", help="Issue a bearer token")
    token_parser.add_argument("principal", help="Principal text to embed in the token")
    token_parser.add_argument(
        "--ttl-days",
        type=int,
        default=None,
        help="Token lifetime in days (default: MEDVAULT_TOKEN_TTL_DAYS)",
    )

    subparsers.add_parser("stats", help="Show store statistics")

    list_parser = subparsers.add_parser("list", help="List a principal's records")
    list_parser.add_argument("principal", help="Owner principal")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    commands = {
        "token": cmd_token,
        "stats": cmd_stats,
        "list": cmd_list,
    }

    return commands[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
