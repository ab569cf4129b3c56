"""
Plain-SQL schema migrations.

Every `migrations/*.sql` file is one version, named after its file stem and
applied in lexical order inside its own transaction. Applied versions are
recorded in `schema_migrations`.

    python -m app.infrastructure.db.migrate up
    python -m app.infrastructure.db.migrate status
    python -m app.infrastructure.db.migrate new add_listing_views
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Sequence

import psycopg

from app.logging import setup_logging
from app.settings import get_settings

logger = logging.getLogger(__name__)

DEFAULT_MIGRATIONS_DIR = Path(os.environ.get("MIGRATIONS_DIR", "migrations"))
SCHEMA_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS schema_migrations (
  version    text PRIMARY KEY,
  applied_at timestamptz NOT NULL DEFAULT now()
);
"""


class MigrationError(Exception):
    pass


def list_migrations(directory: Path) -> list[Path]:
    if not directory.is_dir():
        raise MigrationError(f"migrations dir not found: {directory}")
    return sorted(directory.glob("*.sql"))


def applied_versions(conn: psycopg.Connection) -> dict[str, datetime]:
    with conn.transaction(), conn.cursor() as cur:
        cur.execute(SCHEMA_TABLE_SQL)
        cur.execute("SELECT version, applied_at FROM schema_migrations;")
        return {version: at for version, at in cur.fetchall()}


def pending(directory: Path, applied: dict[str, datetime]) -> list[Path]:
    return [p for p in list_migrations(directory) if p.stem not in applied]


def apply_one(conn: psycopg.Connection, path: Path) -> None:
    with conn.transaction(), conn.cursor() as cur:
        cur.execute(path.read_text(encoding="utf-8"))
        cur.execute(
            "INSERT INTO schema_migrations (version) VALUES (%s);", (path.stem,)
        )
    logger.info("migration applied", extra={"version": path.stem})


def cmd_up(dsn: str, directory: Path) -> int:
    with psycopg.connect(dsn) as conn:
        to_run = pending(directory, applied_versions(conn))
        if not to_run:
            logger.info("no pending migrations")
            return 0
        for path in to_run:
            try:
                apply_one(conn, path)
            except psycopg.Error:
                logger.exception("migration failed", extra={"version": path.stem})
                return 1
    return 0


def cmd_status(dsn: str, directory: Path) -> int:
    with psycopg.connect(dsn) as conn:
        applied = applied_versions(conn)
    for version, at in sorted(applied.items()):
        print(f"applied  {version} @ {at.isoformat()}")
    for path in pending(directory, applied):
        print(f"pending  {path.stem}")
    return 0


def cmd_new(directory: Path, name: str) -> int:
    ts = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M")
    path = directory / f"{ts}_{name}.sql"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("-- write your SQL here\n", encoding="utf-8")
    print(path)
    return 0


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="migrate", description=__doc__.split("\n\n")[0])
    parser.add_argument("--dir", type=Path, default=DEFAULT_MIGRATIONS_DIR)
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("up", help="apply pending migrations")
    sub.add_parser("status", help="list applied and pending versions")
    new = sub.add_parser("new", help="create an empty migration file")
    new.add_argument("name")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parser().parse_args(argv)
    settings = get_settings()
    setup_logging(settings.log_level)
    try:
        if args.command == "new":
            return cmd_new(args.dir, args.name)
        if args.command == "status":
            return cmd_status(settings.database_url, args.dir)
        return cmd_up(settings.database_url, args.dir)
    except MigrationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
