"""
PM Scan Engine - Database Connection Manager
Version: 1.2.0

Changelog:
v1.2.0 (2026-10-17): Helpers narrowed to the ledger (plan id list columns)
v1.1.0 (2026-10-12): Path follows settings.SQLITE_DB_PATH (env override)
v1.0.0 (2026-10-05): Initial database connection manager with async helpers

Provides centralized async SQLite connection management for the generation
ledger. Uses aiosqlite with WAL journal mode and foreign key enforcement.
"""

import os
import json
import aiosqlite
from contextlib import asynccontextmanager

from config import settings


def get_db_path() -> str:
    """Resolve database path, create data directory if needed"""
    db_path = os.environ.get("PM_SCAN_DB", settings.SQLITE_DB_PATH)
    os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)
    return db_path


@asynccontextmanager
async def get_db():
    """Async context manager yielding an aiosqlite connection with WAL + FK"""
    db = await aiosqlite.connect(get_db_path())
    db.row_factory = aiosqlite.Row
    await db.execute("PRAGMA journal_mode=WAL")
    await db.execute("PRAGMA foreign_keys=ON")
    try:
        yield db
    finally:
        await db.close()


async def execute_one(db, sql: str, params=()) -> dict | None:
    """Single ledger row as a dict (None when nothing matched)"""
    cursor = await db.execute(sql, params)
    row = await cursor.fetchone()
    return dict(row) if row else None


async def execute_all(db, sql: str, params=()) -> list[dict]:
    """Ledger rows as dicts, in query order"""
    cursor = await db.execute(sql, params)
    return [dict(row) for row in await cursor.fetchall()]


async def execute_insert(db, sql: str, params=()) -> int:
    """Insert and commit; returns the new row id (batch ids come from here)"""
    cursor = await db.execute(sql, params)
    await db.commit()
    return cursor.lastrowid


async def execute_update(db, sql: str, params=()) -> int:
    """Update and commit any pending item inserts with it; returns rows touched"""
    cursor = await db.execute(sql, params)
    await db.commit()
    return cursor.rowcount


def ids_to_text(ids) -> str:
    """Plan id list -> TEXT column ('[]' for None)"""
    return json.dumps(list(ids) if ids is not None else [])


def ids_from_text(text: str) -> list:
    """TEXT column -> plan id list; empty or unreadable columns give []"""
    if not text:
        return []
    try:
        value = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return []
    return value if isinstance(value, list) else []
