from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

from .canonical_profile import CanonicalProfile


class ExtractionResult(BaseModel):
    profile: CanonicalProfile
    method: Literal["sync", "async", "extension"]
    job_id: str | None = None

    model_config = ConfigDict(extra="forbid")
