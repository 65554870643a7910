"""SQLite storage for briefs and analysis run history.

Briefs are keyed by website URL and stored as opaque JSON: the store never
interprets a brief beyond the two columns it indexes for listing
(company name, ready flag). The pipeline itself never touches storage;
the CLI and the web server do.

Uses Python's built-in sqlite3.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from typing import Any

import config
from schemas.brief import Brief

logger = logging.getLogger(__name__)

DB_PATH = config.DB_PATH

# Thread-local connections (sqlite3 objects can't be shared across threads)
_local = threading.local()


def _get_conn() -> sqlite3.Connection:
    """Get a thread-local SQLite connection."""
    if getattr(_local, "conn", None) is None:
        _local.conn = sqlite3.connect(str(DB_PATH), check_same_thread=False)
        _local.conn.row_factory = sqlite3.Row
        _local.conn.execute("PRAGMA journal_mode=WAL")
    return _local.conn


def close_db():
    """Close this thread's connection (next call reopens against DB_PATH)."""
    conn = getattr(_local, "conn", None)
    if conn is not None:
        conn.close()
        _local.conn = None


def init_db():
    """Create tables if they don't exist. Call once at startup."""
    conn = _get_conn()
    conn.executescript("""
        CREATE TABLE IF NOT EXISTS briefs (
            website_url          TEXT    PRIMARY KEY,
            company_name         TEXT,
            ready_for_generation INTEGER NOT NULL DEFAULT 0,
            brief_json           TEXT    NOT NULL DEFAULT '{}',
            created_at           TEXT    NOT NULL DEFAULT (datetime('now')),
            updated_at           TEXT    NOT NULL DEFAULT (datetime('now'))
        );

        CREATE TABLE IF NOT EXISTS analysis_runs (
            id              INTEGER PRIMARY KEY AUTOINCREMENT,
            website_url     TEXT    NOT NULL,
            status          TEXT    NOT NULL DEFAULT 'running',
            max_pages       INTEGER NOT NULL DEFAULT 0,
            pages_analyzed  INTEGER,
            error_message   TEXT,
            elapsed_seconds REAL,
            created_at      TEXT    NOT NULL DEFAULT (datetime('now'))
        );

        CREATE INDEX IF NOT EXISTS idx_analysis_runs_url
            ON analysis_runs(website_url);
    """)
    conn.commit()
    logger.info("SQLite database initialized: %s", DB_PATH)


# ---------------------------------------------------------------------------
# Briefs
# ---------------------------------------------------------------------------

def _brief_payload(brief: Brief | dict) -> dict:
    if isinstance(brief, Brief):
        return brief.model_dump(mode="json")
    return dict(brief)


def _index_columns(payload: dict) -> tuple[str | None, int]:
    summary = payload.get("brand_summary") or {}
    company = summary.get("company_name") if isinstance(summary, dict) else None
    return company, 1 if payload.get("ready_for_generation") else 0


def create_brief(website_url: str, brief: Brief | dict) -> bool:
    """Insert a brief. Returns False if one already exists for this URL."""
    payload = _brief_payload(brief)
    company, ready = _index_columns(payload)
    conn = _get_conn()
    try:
        conn.execute(
            """
            INSERT INTO briefs (website_url, company_name, ready_for_generation, brief_json)
            VALUES (?,?,?,?)
            """,
            (website_url, company, ready, json.dumps(payload, default=str)),
        )
    except sqlite3.IntegrityError:
        logger.info("Brief already exists for %s", website_url)
        return False
    conn.commit()
    logger.info("Created brief: %s (%s)", website_url, company)
    return True


def update_brief(website_url: str, brief: Brief | dict) -> bool:
    """Replace a stored brief. Returns True if found."""
    payload = _brief_payload(brief)
    company, ready = _index_columns(payload)
    conn = _get_conn()
    cur = conn.execute(
        """
        UPDATE briefs
        SET brief_json=?, company_name=?, ready_for_generation=?, updated_at=datetime('now')
        WHERE website_url=?
        """,
        (json.dumps(payload, default=str), company, ready, website_url),
    )
    conn.commit()
    return cur.rowcount > 0


def upsert_brief(website_url: str, brief: Brief | dict):
    """Create or replace the brief for ``website_url``."""
    if not update_brief(website_url, brief):
        create_brief(website_url, brief)


def get_brief(website_url: str) -> dict | None:
    """Return the stored brief JSON for ``website_url``, or None."""
    conn = _get_conn()
    row = conn.execute(
        "SELECT brief_json FROM briefs WHERE website_url=?", (website_url,),
    ).fetchone()
    if not row:
        return None
    return json.loads(row["brief_json"])


def list_briefs(limit: int = 50) -> list[dict]:
    """List stored briefs, most recently updated first."""
    conn = _get_conn()
    rows = conn.execute(
        """
        SELECT website_url, company_name, ready_for_generation, created_at, updated_at
        FROM briefs
        ORDER BY updated_at DESC, website_url
        LIMIT ?
        """,
        (limit,),
    ).fetchall()
    return [
        {
            "website_url": r["website_url"],
            "company_name": r["company_name"],
            "ready_for_generation": bool(r["ready_for_generation"]),
            "created_at": r["created_at"],
            "updated_at": r["updated_at"],
        }
        for r in rows
    ]


def delete_brief(website_url: str) -> bool:
    """Delete a brief. Returns True if found."""
    conn = _get_conn()
    cur = conn.execute("DELETE FROM briefs WHERE website_url=?", (website_url,))
    conn.commit()
    return cur.rowcount > 0


# ---------------------------------------------------------------------------
# Analysis runs
# ---------------------------------------------------------------------------

def create_run(website_url: str, max_pages: int) -> int:
    """Insert a new analysis run. Returns the run_id."""
    conn = _get_conn()
    cur = conn.execute(
        "INSERT INTO analysis_runs (website_url, status, max_pages) VALUES (?, 'running', ?)",
        (website_url, max_pages),
    )
    conn.commit()
    run_id = cur.lastrowid
    logger.info("Created analysis run #%d (%s, max_pages=%d)", run_id, website_url, max_pages)
    return run_id


def complete_run(run_id: int, pages_analyzed: int, elapsed: float):
    """Mark a run as completed."""
    conn = _get_conn()
    conn.execute(
        "UPDATE analysis_runs SET status='completed', pages_analyzed=?, elapsed_seconds=? WHERE id=?",
        (pages_analyzed, round(elapsed, 1), run_id),
    )
    conn.commit()


def fail_run(run_id: int, error: str, elapsed: float):
    """Mark a run as failed."""
    conn = _get_conn()
    conn.execute(
        "UPDATE analysis_runs SET status='failed', error_message=?, elapsed_seconds=? WHERE id=?",
        (error[:500], round(elapsed, 1), run_id),
    )
    conn.commit()


def list_runs(website_url: str | None = None, limit: int = 50) -> list[dict[str, Any]]:
    """List recent runs, newest first, optionally for one website."""
    conn = _get_conn()
    if website_url:
        rows = conn.execute(
            "SELECT * FROM analysis_runs WHERE website_url=? ORDER BY id DESC LIMIT ?",
            (website_url, limit),
        ).fetchall()
    else:
        rows = conn.execute(
            "SELECT * FROM analysis_runs ORDER BY id DESC LIMIT ?", (limit,),
        ).fetchall()
    return [dict(r) for r in rows]
