from __future__ import annotations

import logging
import time
from typing import Any, Optional

from models.extraction_result import ExtractionResult
from ports.provider import ProviderTransport
from services.domain_utils import clean_profile_url
from services.errors import ConfigurationError, ExtractionError, NormalizationError, TriggerError
from services.field_resolution import key, resolve
from services.job_poller import JobPoller
from services.profile_normalizer import normalize


logger = logging.getLogger(__name__)

JOB_ID_CANDIDATES = (key("snapshot_id"), key("snapshotId"), key("job_id"))


def _normalize(raw: Any):
    try:
        return normalize(raw)
    except NormalizationError:
        raise
    except Exception as e:
        raise NormalizationError(f"Provider payload could not be normalized: {e}") from e


def _first_profile(payload: Any) -> Optional[dict]:
    if isinstance(payload, list):
        payload = payload[0] if payload else None
    if isinstance(payload, dict) and payload:
        return payload
    return None


class ExtractionOrchestrator:
    """Sync scrape first, then trigger + poll; always returns a CanonicalProfile or a classified error.

    Holds no persistence; the caller records the outcome.
    """

    def __init__(self, transport: ProviderTransport, poller: Optional[JobPoller] = None) -> None:
        self.transport = transport
        self.poller = poller or JobPoller(transport)

    def extract(self, target_url: str) -> ExtractionResult:
        """Every failure leaves as an ExtractionError subclass."""
        try:
            url = clean_profile_url(target_url)
        except ValueError as e:
            raise TriggerError(f"Cannot extract an invalid profile URL: {e}") from e
        try:
            return self._extract(url)
        except ExtractionError:
            raise
        except Exception as e:
            logger.exception("Unclassified extraction failure", extra={"step": "extract", "status": "failed"})
            raise ExtractionError(f"Unexpected extraction failure: {e}") from e

    def _extract(self, url: str) -> ExtractionResult:
        t0 = time.time()

        raw = self._try_sync(url)
        if raw is not None:
            profile = _normalize(raw)
            logger.info(
                "Synchronous extraction succeeded",
                extra={"step": "extract", "status": "sync", "duration_ms": int((time.time() - t0) * 1000)},
            )
            return ExtractionResult(profile=profile, method="sync")

        job_id = self._trigger(url)
        raw = self.poller.poll(job_id)
        profile = _normalize(raw)
        logger.info(
            "Asynchronous extraction succeeded",
            extra={"step": "extract", "status": "async", "job_id": job_id, "duration_ms": int((time.time() - t0) * 1000)},
        )
        return ExtractionResult(profile=profile, method="async", job_id=job_id)

    def _try_sync(self, url: str) -> Optional[dict]:
        try:
            payload = self.transport.scrape(url)
        except ConfigurationError:
            raise
        except ExtractionError as e:
            logger.info(
                "Synchronous method not available, falling back to async",
                extra={"step": "scrape", "status": "fallback", "error": str(e)},
            )
            return None
        return _first_profile(payload)

    def _trigger(self, url: str) -> str:
        try:
            response = self.transport.trigger(url)
        except ConfigurationError:
            raise
        except ExtractionError as e:
            raise TriggerError(f"Job creation failed: {e}") from e
        job_id = resolve(response or {}, JOB_ID_CANDIDATES)
        if not job_id:
            raise TriggerError("No snapshot ID returned from provider")
        logger.info("Triggered async extraction", extra={"step": "trigger", "job_id": job_id})
        return job_id
