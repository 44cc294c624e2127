from __future__ import annotations

import sqlite3
from typing import List, Optional

from models.extraction_status import ExtractionStatusRecord


_COLUMNS = (
    "id",
    "user_id",
    "normalized_url",
    "input_url",
    "is_own_profile",
    "status",
    "method",
    "job_id",
    "error_type",
    "error_message",
    "retry_count",
    "started_at",
    "completed_at",
    "updated_at",
)
_SELECT = f"SELECT {', '.join(_COLUMNS)} FROM extraction_status"


def _to_record(row) -> ExtractionStatusRecord:
    data = dict(zip(_COLUMNS, row))
    data["is_own_profile"] = bool(data["is_own_profile"])
    return ExtractionStatusRecord(**data)


class ExtractionStatusRepo:
    """processing -> completed | failed per (user_id, normalized_url). Rows are never deleted."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def find(self, user_id: str, normalized_url: str) -> Optional[ExtractionStatusRecord]:
        cur = self.conn.cursor()
        cur.execute(f"{_SELECT} WHERE user_id = ? AND normalized_url = ?", (user_id, normalized_url))
        row = cur.fetchone()
        return _to_record(row) if row else None

    def insert_processing(
        self,
        user_id: str,
        normalized_url: str,
        input_url: Optional[str] = None,
        is_own_profile: bool = False,
    ) -> ExtractionStatusRecord:
        """Insert a fresh 'processing' row. Raises sqlite3.IntegrityError if the pair already exists."""
        try:
            self.conn.execute(
                (
                    "INSERT INTO extraction_status (user_id, normalized_url, input_url, is_own_profile, status) "
                    "VALUES (?, ?, ?, ?, 'processing')"
                ),
                (user_id, normalized_url, input_url, 1 if is_own_profile else 0),
            )
            self.conn.commit()
        except sqlite3.IntegrityError:
            self.conn.rollback()
            raise
        record = self.find(user_id, normalized_url)
        if record is None:
            raise RuntimeError("Failed to read back extraction_status row")
        return record

    def reopen_failed(self, user_id: str, normalized_url: str) -> bool:
        """Flip a failed row back to processing for a re-trigger; False if nothing was failed."""
        cur = self.conn.execute(
            (
                "UPDATE extraction_status SET status = 'processing', error_type = NULL, error_message = NULL, "
                " retry_count = retry_count + 1, started_at = datetime('now'), completed_at = NULL, "
                " updated_at = datetime('now') "
                "WHERE user_id = ? AND normalized_url = ? AND status = 'failed'"
            ),
            (user_id, normalized_url),
        )
        self.conn.commit()
        return cur.rowcount == 1

    def mark_completed(
        self,
        user_id: str,
        normalized_url: str,
        method: Optional[str],
        job_id: Optional[str] = None,
    ) -> None:
        self.conn.execute(
            (
                "UPDATE extraction_status SET status = 'completed', method = ?, job_id = ?, "
                " error_type = NULL, error_message = NULL, completed_at = datetime('now'), "
                " updated_at = datetime('now') "
                "WHERE user_id = ? AND normalized_url = ?"
            ),
            (method, job_id, user_id, normalized_url),
        )
        self.conn.commit()

    def mark_failed(
        self,
        user_id: str,
        normalized_url: str,
        error_type: str,
        error_message: str,
        job_id: Optional[str] = None,
    ) -> None:
        self.conn.execute(
            (
                "UPDATE extraction_status SET status = 'failed', error_type = ?, error_message = ?, "
                " job_id = COALESCE(?, job_id), completed_at = datetime('now'), updated_at = datetime('now') "
                "WHERE user_id = ? AND normalized_url = ?"
            ),
            (error_type, error_message, job_id, user_id, normalized_url),
        )
        self.conn.commit()

    def list_by_status(self, status: Optional[str] = None, limit: int = 50) -> List[ExtractionStatusRecord]:
        cur = self.conn.cursor()
        if status:
            cur.execute(f"{_SELECT} WHERE status = ? ORDER BY updated_at DESC, id DESC LIMIT ?", (status, limit))
        else:
            cur.execute(f"{_SELECT} ORDER BY updated_at DESC, id DESC LIMIT ?", (limit,))
        return [_to_record(r) for r in cur.fetchall()]
