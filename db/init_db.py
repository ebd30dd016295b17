#!/usr/bin/env python3
"""Initialize the database schema.

Runs every SQL file in db/migrations/ (sorted by name) against the database
pointed to by DATABASE_URL, inside a single transaction.

Usage:
  python -m db.init_db

Requirements:
  - DATABASE_URL must be set
  - SQLAlchemy and asyncpg installed (see pyproject.toml)
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Iterable

from dotenv import load_dotenv
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine

from core.storage.postgres.config import PostgresConfig

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


def _iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a SQL script into executable statements.

    Supports:
    - `--` line comments
    - quoted strings (single and double quotes)

    No $$ quoting: the migrations do not define functions.
    """

    buf: list[str] = []
    in_single = False
    in_double = False
    i = 0
    while i < len(sql):
        ch = sql[i]

        # Handle -- comments (only when not in quotes)
        if not in_single and not in_double and ch == "-" and i + 1 < len(sql) and sql[i + 1] == "-":
            # Skip until end of line
            while i < len(sql) and sql[i] not in ("\n", "\r"):
                i += 1
            continue

        if ch == "'" and not in_double:
            # Toggle single quote state unless escaped by doubling ''
            if in_single and i + 1 < len(sql) and sql[i + 1] == "'":
                buf.append("''")
                i += 2
                continue
            in_single = not in_single
            buf.append(ch)
            i += 1
            continue

        if ch == '"' and not in_single:
            in_double = not in_double
            buf.append(ch)
            i += 1
            continue

        if ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf = []
            if stmt:
                yield stmt
            i += 1
            continue

        buf.append(ch)
        i += 1

    tail = "".join(buf).strip()
    if tail:
        yield tail


def migration_files(directory: Path = MIGRATIONS_DIR) -> list[Path]:
    return sorted(directory.glob("*.sql"))


async def apply_migrations(database_url: str, directory: Path = MIGRATIONS_DIR) -> int:
    """Apply all migrations. Returns the number of statements executed."""
    engine = create_async_engine(database_url, echo=False)
    executed = 0
    try:
        async with engine.begin() as conn:
            for path in migration_files(directory):
                logger.info("Applying %s", path.name)
                for stmt in _iter_sql_statements(path.read_text(encoding="utf-8")):
                    await conn.execute(text(stmt))
                    executed += 1
    finally:
        await engine.dispose()
    return executed


def main() -> int:
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    try:
        config = PostgresConfig.from_env()
    except RuntimeError as exc:
        raise SystemExit(str(exc)) from exc

    executed = asyncio.run(apply_migrations(config.database_url))
    logger.info("Database schema applied (%d statements)", executed)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
