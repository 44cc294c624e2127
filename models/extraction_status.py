from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict


ExtractionState = Literal["processing", "completed", "failed"]


class ExtractionStatusRecord(BaseModel):
    """Persisted per (user_id, normalized_url); drives dedup and status queries."""

    id: int | None = None
    user_id: str
    normalized_url: str
    input_url: str | None = None
    is_own_profile: bool = False
    status: ExtractionState = "processing"
    method: str | None = None
    job_id: str | None = None
    error_type: str | None = None
    error_message: str | None = None
    retry_count: int = 0
    started_at: str | None = None
    completed_at: str | None = None
    updated_at: str | None = None

    model_config = ConfigDict(extra="ignore")


class DedupOutcome(BaseModel):
    normalized_url: str
    proceed: bool
    already_exists: bool = False
    existing_record: ExtractionStatusRecord | None = None

    model_config = ConfigDict(extra="forbid")
