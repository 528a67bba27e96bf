"""
SQLite schema DDL for the precomputed-recommendation cache.

All statements use ``IF NOT EXISTS`` so ``apply_schema()`` is idempotent:
safe to call on every start-up and in tests.

Tables
------
cached_recommendations — one row per subject: the ranked list serialised as
                         JSON (see ``reco_engine.models.cache``), replaced
                         wholesale by each precompute of that subject.
"""

from __future__ import annotations

import logging
import sqlite3

logger = logging.getLogger(__name__)

# ── DDL statements ─────────────────────────────────────────────────────────────

_DDL_CACHED_RECOMMENDATIONS = """
CREATE TABLE IF NOT EXISTS cached_recommendations (
    subject_key         TEXT    PRIMARY KEY,
    payload_json        TEXT    NOT NULL,
    item_count          INTEGER NOT NULL CHECK (item_count >= 0),
    max_recommendations INTEGER,
    computed_at         TEXT    NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_cached_recommendations_computed_at
    ON cached_recommendations (computed_at);
"""

_ALL_DDL: list[str] = [_DDL_CACHED_RECOMMENDATIONS]

ALL_TABLE_NAMES: list[str] = ["cached_recommendations"]


def apply_schema(conn: sqlite3.Connection) -> None:
    """Apply all DDL statements to ``conn``.  Idempotent."""
    logger.debug("Applying schema to database...")

    for ddl in _ALL_DDL:
        for statement in _split_ddl(ddl):
            conn.execute(statement)

    conn.commit()
    logger.info("Schema applied: %d table(s) created/verified.", len(ALL_TABLE_NAMES))


def _split_ddl(ddl: str) -> list[str]:
    """Split a multi-statement DDL block on semicolons."""
    return [s.strip() for s in ddl.split(";") if s.strip()]


def get_existing_tables(conn: sqlite3.Connection) -> list[str]:
    """Sorted names of the tables present in the database."""
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name;"
    ).fetchall()
    return [row["name"] for row in rows]
