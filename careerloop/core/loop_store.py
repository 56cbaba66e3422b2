from __future__ import annotations

import json
import os
import sqlite3
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from careerloop.core.config import settings
from careerloop.loop.models import LoopSnapshot

_conn: sqlite3.Connection | None = None
_conn_lock = threading.Lock()


class LoopConflictError(RuntimeError):
    """Raised when a snapshot was written by someone else since it was read."""


@dataclass(frozen=True)
class LoopRecord:
    snapshot: LoopSnapshot
    job_description: str
    job_skills: tuple[str, ...]
    version: int
    created_at: datetime
    updated_at: datetime


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _get_connection() -> sqlite3.Connection:
    global _conn
    with _conn_lock:
        if _conn is not None:
            return _conn

        db_path = settings.loop_db_path
        directory = os.path.dirname(db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        _conn = sqlite3.connect(
            db_path,
            check_same_thread=False,
            timeout=5,
            isolation_level=None,
        )
        _conn.execute("PRAGMA journal_mode=WAL;")
        _conn.execute("PRAGMA synchronous=NORMAL;")
        _conn.execute("PRAGMA busy_timeout=5000;")
        _conn.execute(
            """
            CREATE TABLE IF NOT EXISTS loop_records (
                loop_id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                snapshot_json TEXT NOT NULL,
                job_description TEXT NOT NULL,
                job_skills_json TEXT NOT NULL,
                version INTEGER NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );
            """
        )
        _conn.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_loop_records_updated
            ON loop_records (updated_at);
            """
        )
        return _conn


def init_loop_store() -> None:
    _get_connection()


def _row_to_record(row: tuple) -> LoopRecord:
    return LoopRecord(
        snapshot=LoopSnapshot.model_validate_json(row[0]),
        job_description=row[1],
        job_skills=tuple(json.loads(row[2]) if row[2] else []),
        version=int(row[3]),
        created_at=datetime.fromisoformat(row[4]),
        updated_at=datetime.fromisoformat(row[5]),
    )


def create_loop_record(
    snapshot: LoopSnapshot, *, job_description: str, job_skills: list[str] | tuple[str, ...]
) -> LoopRecord:
    conn = _get_connection()
    now = _utc_now()
    skills = tuple(job_skills)
    with _conn_lock:
        conn.execute(
            """
            INSERT INTO loop_records (
                loop_id, user_id, snapshot_json, job_description, job_skills_json,
                version, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                snapshot.loop_id,
                snapshot.user_id,
                snapshot.model_dump_json(),
                job_description,
                json.dumps(list(skills), ensure_ascii=False),
                1,
                now.isoformat(),
                now.isoformat(),
            ),
        )
    return LoopRecord(
        snapshot=snapshot,
        job_description=job_description,
        job_skills=skills,
        version=1,
        created_at=now,
        updated_at=now,
    )


def get_loop_record(loop_id: str, user_id: str) -> LoopRecord | None:
    """Return the loop if it exists and belongs to ``user_id``."""
    conn = _get_connection()
    with _conn_lock:
        cur = conn.execute(
            """
            SELECT snapshot_json, job_description, job_skills_json, version, created_at, updated_at
            FROM loop_records
            WHERE loop_id = ? AND user_id = ?
            """,
            (loop_id, user_id),
        )
        row = cur.fetchone()

    if not row:
        return None
    return _row_to_record(row)


def save_loop_snapshot(record: LoopRecord, snapshot: LoopSnapshot) -> LoopRecord:
    """Write ``snapshot`` only if nobody saved since ``record`` was read."""
    conn = _get_connection()
    now = _utc_now()
    with _conn_lock:
        cur = conn.execute(
            """
            UPDATE loop_records
            SET snapshot_json = ?, version = version + 1, updated_at = ?
            WHERE loop_id = ? AND user_id = ? AND version = ?
            """,
            (
                snapshot.model_dump_json(),
                now.isoformat(),
                snapshot.loop_id,
                snapshot.user_id,
                record.version,
            ),
        )
        updated = cur.rowcount

    if updated != 1:
        raise LoopConflictError(
            f"Loop '{snapshot.loop_id}' was modified concurrently (expected version {record.version})."
        )
    return LoopRecord(
        snapshot=snapshot,
        job_description=record.job_description,
        job_skills=record.job_skills,
        version=record.version + 1,
        created_at=record.created_at,
        updated_at=now,
    )


def purge_stale_loops(retention_days: int | None = None) -> int:
    days = max(1, int(retention_days if retention_days is not None else settings.loop_retention_days))
    cutoff = (_utc_now() - timedelta(days=days)).isoformat()
    conn = _get_connection()
    with _conn_lock:
        cur = conn.execute("DELETE FROM loop_records WHERE updated_at < ?", (cutoff,))
        return cur.rowcount


def clear_loop_records() -> None:
    conn = _get_connection()
    with _conn_lock:
        conn.execute("DELETE FROM loop_records")
