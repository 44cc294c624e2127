from __future__ import annotations

from typing import List, Optional, Protocol

from models.canonical_profile import CanonicalProfile
from models.extraction_status import ExtractionStatusRecord


class ProfilesRepoPort(Protocol):
    def upsert_target_profile(
        self,
        user_id: str,
        linkedin_url: str,
        normalized_url: str,
        profile: CanonicalProfile,
        method: Optional[str] = None,
        job_id: Optional[str] = None,
    ) -> int:
        ...

    def upsert_user_profile(
        self,
        user_id: str,
        linkedin_url: str,
        normalized_url: str,
        profile: CanonicalProfile,
        method: Optional[str] = None,
        job_id: Optional[str] = None,
    ) -> str:
        ...

    def get_target_profile(self, user_id: str, normalized_url: str) -> Optional[CanonicalProfile]:
        ...


class ExtractionStatusRepoPort(Protocol):
    def find(self, user_id: str, normalized_url: str) -> Optional[ExtractionStatusRecord]:
        ...

    def insert_processing(
        self,
        user_id: str,
        normalized_url: str,
        input_url: Optional[str] = None,
        is_own_profile: bool = False,
    ) -> ExtractionStatusRecord:
        ...

    def reopen_failed(self, user_id: str, normalized_url: str) -> bool:
        ...

    def mark_completed(self, user_id: str, normalized_url: str, method: Optional[str], job_id: Optional[str] = None) -> None:
        ...

    def mark_failed(
        self,
        user_id: str,
        normalized_url: str,
        error_type: str,
        error_message: str,
        job_id: Optional[str] = None,
    ) -> None:
        ...

    def list_by_status(self, status: Optional[str] = None, limit: int = 50) -> List[ExtractionStatusRecord]:
        ...
