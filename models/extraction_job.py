from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


READY = "ready"
FAILED_STATUSES = ("error", "failed")


@dataclass
class ExtractionJob:
    """Provider-side snapshot being polled. Lives only for the duration of one poll loop."""

    job_id: str
    status: Optional[str] = None
    attempts: int = 0

    @property
    def is_ready(self) -> bool:
        return self.status == READY

    @property
    def is_failed(self) -> bool:
        return self.status in FAILED_STATUSES
