from __future__ import annotations

import logging
import sqlite3
from typing import Any, Optional

from db.repos.extraction_status_repo import ExtractionStatusRepo
from models.extraction_result import ExtractionResult
from pipelines.runner import RunContext
from services.errors import ExtractionError, NormalizationError
from services.orchestrator import ExtractionOrchestrator
from services.profile_normalizer import normalize


logger = logging.getLogger(__name__)


def record_failure(repo: ExtractionStatusRepo, ctx: RunContext, error: Exception) -> RunContext:
    error_type = getattr(error, "error_type", "unexpected_error")
    repo.mark_failed(
        ctx.user_id,
        ctx.normalized_url or "",
        error_type=error_type,
        error_message=str(error),
        job_id=getattr(error, "job_id", None),
    )
    ctx.error = error
    ctx.halted = True
    return ctx


class RunExtraction:
    """Provider extraction; a classified failure is written to the status record instead of raised."""

    def __init__(self, conn: sqlite3.Connection, orchestrator: ExtractionOrchestrator) -> None:
        self.conn = conn
        self.orchestrator = orchestrator
        self.status_repo = ExtractionStatusRepo(conn)

    def run(self, ctx: RunContext) -> RunContext:
        try:
            ctx.result = self.orchestrator.extract(ctx.target_url)
        except ExtractionError as e:
            logger.warning(
                "Extraction failed for %s", ctx.normalized_url,
                extra={"step": "extract", "status": "failed", "error": e.error_type},
            )
            return record_failure(self.status_repo, ctx, e)
        except Exception as e:
            logger.exception("Unexpected extraction failure for %s", ctx.normalized_url, extra={"step": "extract", "status": "failed"})
            return record_failure(self.status_repo, ctx, e)
        return ctx


class NormalizeScraped:
    """Browser-extension payloads skip the provider and go straight to the normalizer."""

    def __init__(self, conn: sqlite3.Connection, payload: Any, data_source: Optional[str] = "chrome_extension") -> None:
        self.conn = conn
        self.payload = payload
        self.data_source = data_source
        self.status_repo = ExtractionStatusRepo(conn)

    def run(self, ctx: RunContext) -> RunContext:
        try:
            profile = normalize(self.payload, data_source=self.data_source)
        except NormalizationError as e:
            return record_failure(self.status_repo, ctx, e)
        ctx.result = ExtractionResult(profile=profile, method="extension")
        return ctx
