from __future__ import annotations

import logging
import sqlite3

from db.repos.extraction_status_repo import ExtractionStatusRepo
from db.repos.profiles_repo import ProfilesRepo
from pipelines.runner import RunContext
from pipelines.steps.run_extraction import record_failure
from services.errors import PersistenceError


logger = logging.getLogger(__name__)


class PersistProfile:
    """Stores the profile and completes the status record; a storage failure leaves the record 'failed' so it can be retried."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        self.profiles_repo = ProfilesRepo(conn)
        self.status_repo = ExtractionStatusRepo(conn)

    def run(self, ctx: RunContext) -> RunContext:
        result = ctx.result
        if result is None:
            return ctx
        normalized = ctx.normalized_url or ""
        try:
            if ctx.is_own_profile:
                self.profiles_repo.upsert_user_profile(
                    ctx.user_id, ctx.target_url, normalized, result.profile, method=result.method, job_id=result.job_id
                )
            else:
                ctx.meta["target_profile_id"] = self.profiles_repo.upsert_target_profile(
                    ctx.user_id, ctx.target_url, normalized, result.profile, method=result.method, job_id=result.job_id
                )
            self.status_repo.mark_completed(ctx.user_id, normalized, result.method, job_id=result.job_id)
        except Exception as e:
            self.conn.rollback()
            logger.error(
                "Saving profile failed for %s", normalized,
                extra={"step": "persist", "status": "failed", "error": str(e)},
            )
            error = PersistenceError(f"Saving profile failed: {e}", job_id=result.job_id)
            error.__cause__ = e
            return record_failure(self.status_repo, ctx, error)
        logger.info(
            "Saved profile for %s", normalized,
            extra={"step": "persist", "status": "completed", "job_id": result.job_id or "-"},
        )
        return ctx
