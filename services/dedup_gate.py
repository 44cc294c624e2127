from __future__ import annotations

import logging
import sqlite3

from models.extraction_status import DedupOutcome
from ports.repos import ExtractionStatusRepoPort
from services.domain_utils import normalize_profile_url


logger = logging.getLogger(__name__)


class DedupGate:
    """At most one extraction per (user, normalized target).

    The UNIQUE(user_id, normalized_url) constraint settles races: the loser's
    IntegrityError becomes an ``already_exists`` outcome.
    """

    def __init__(self, status_repo: ExtractionStatusRepoPort) -> None:
        self.status_repo = status_repo

    def check_and_reserve(self, user_id: str, target_url: str, is_own_profile: bool = False) -> DedupOutcome:
        normalized = self._normalize(target_url)
        existing = self.status_repo.find(user_id, normalized)
        if existing is not None:
            logger.info(
                "Extraction already recorded for %s", normalized,
                extra={"step": "dedup", "status": existing.status},
            )
            return DedupOutcome(normalized_url=normalized, proceed=False, already_exists=True, existing_record=existing)

        try:
            self.status_repo.insert_processing(user_id, normalized, input_url=target_url, is_own_profile=is_own_profile)
        except sqlite3.IntegrityError:
            logger.info("Lost reservation race for %s", normalized, extra={"step": "dedup", "status": "duplicate"})
            return DedupOutcome(
                normalized_url=normalized,
                proceed=False,
                already_exists=True,
                existing_record=self.status_repo.find(user_id, normalized),
            )
        return DedupOutcome(normalized_url=normalized, proceed=True)

    def reopen(self, user_id: str, target_url: str, is_own_profile: bool = False) -> DedupOutcome:
        """Manual re-trigger: only a failed record may run again."""
        normalized = self._normalize(target_url)
        if self.status_repo.reopen_failed(user_id, normalized):
            logger.info("Re-triggering failed extraction for %s", normalized, extra={"step": "dedup", "status": "processing"})
            return DedupOutcome(normalized_url=normalized, proceed=True)
        existing = self.status_repo.find(user_id, normalized)
        if existing is None:
            return self.check_and_reserve(user_id, target_url, is_own_profile=is_own_profile)
        return DedupOutcome(normalized_url=normalized, proceed=False, already_exists=True, existing_record=existing)

    @staticmethod
    def _normalize(target_url: str) -> str:
        normalized = normalize_profile_url(target_url)
        if not normalized:
            raise ValueError(f"Invalid target URL: {target_url!r}")
        return normalized
