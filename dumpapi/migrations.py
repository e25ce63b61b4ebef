"""Tracking and applying SQL migration scripts.

Functions take a DB-API 2.0 connection that uses the ``qmark`` parameter style.
"""

from __future__ import annotations

import io
import logging
from os import PathLike
from pathlib import Path
from typing import Any, Iterable

MIGRATION_DIR = "migrations"

_log = logging.getLogger(__name__)


def apply_migrations(
    conn: Any,
    migrations: Iterable[str],
    migration_dir: str | PathLike[str] = MIGRATION_DIR,
) -> None:
    """Run each migration script and record it, all in one transaction."""
    directory = Path(migration_dir)
    cursor = conn.cursor()
    try:
        for migration in migrations:
            _log.info("Applying migration `%s`...", migration)
            script = (directory / migration).read_text(encoding="utf-8")
            cursor.execute(script)
            cursor.execute(
                "INSERT INTO migrations (migration) VALUES (?)", (migration,)
            )
        conn.commit()
    except BaseException:
        conn.rollback()
        raise
    finally:
        cursor.close()


def read_migration_records_from_file(records: Iterable[str] | str) -> list[str]:
    """Return the migration names listed one per line."""
    if isinstance(records, str):
        records = io.StringIO(records)
    return [line.removesuffix("\n").removesuffix("\r") for line in records]


def read_migration_records_from_db(conn: Any) -> list[str]:
    """Return the names of applied migrations in the order they were applied."""
    cursor = conn.cursor()
    try:
        cursor.execute("SELECT migration FROM migrations ORDER BY id")
        return [migration for (migration,) in cursor.fetchall()]
    finally:
        cursor.close()


def get_needed_migrations(
    migration_records: Iterable[str], db_migrations: Iterable[str]
) -> list[str]:
    """Return the recorded migrations not yet applied, in record order."""
    applied = set(db_migrations)
    needed = []
    for migration in migration_records:
        if migration in applied:
            _log.info("Skipping migration `%s`.", migration)
            continue
        needed.append(migration)
    return needed