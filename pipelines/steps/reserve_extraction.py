from __future__ import annotations

import sqlite3

from db.repos.extraction_status_repo import ExtractionStatusRepo
from pipelines.runner import RunContext
from services.dedup_gate import DedupGate


class ReserveExtraction:
    """Dedup gate as a pipeline step; halts the run when the pair was already extracted."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        self.gate = DedupGate(ExtractionStatusRepo(conn))

    def run(self, ctx: RunContext) -> RunContext:
        if ctx.retry:
            outcome = self.gate.reopen(ctx.user_id, ctx.target_url, is_own_profile=ctx.is_own_profile)
        else:
            outcome = self.gate.check_and_reserve(ctx.user_id, ctx.target_url, is_own_profile=ctx.is_own_profile)
        ctx.normalized_url = outcome.normalized_url
        if outcome.already_exists:
            ctx.already_exists = True
            ctx.existing_record = outcome.existing_record
            ctx.halted = True
        return ctx
