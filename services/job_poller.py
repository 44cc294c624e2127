from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Optional

from config.settings import Settings, get_settings
from models.extraction_job import ExtractionJob
from ports.provider import ProviderTransport
from services.errors import (
    ExtractionTimeoutError,
    ProviderResponseError,
    TerminalProviderError,
    TransientNetworkError,
)
from services.field_resolution import key, resolve, text


logger = logging.getLogger(__name__)

# The provider has reported the job status under both spellings.
STATUS_CANDIDATES = (key("Status"), key("status"))


def read_status(payload: Dict[str, Any]) -> Optional[str]:
    if not isinstance(payload, dict):
        return None
    status = resolve(payload, STATUS_CANDIDATES, coerce=text)
    return status.lower() if status else None


class JobPoller:
    """Drive one provider snapshot to ready/failed with a bounded, two-tier schedule.

    Attempts 1..fast_attempts wait ``fast_delay`` between polls, later ones
    ``slow_delay``. Network failures wait ``network_retry_delay`` and other
    retryable provider errors ``error_retry_delay``; every poll counts toward
    ``max_attempts``.
    """

    def __init__(
        self,
        transport: ProviderTransport,
        settings: Optional[Settings] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        settings = settings or get_settings()
        self.transport = transport
        self.sleep = sleep
        self.max_attempts = settings.poll_max_attempts
        self.fast_attempts = settings.poll_fast_attempts
        self.fast_delay = settings.poll_fast_delay_seconds
        self.slow_delay = settings.poll_slow_delay_seconds
        self.network_retry_delay = settings.network_retry_delay_seconds
        self.error_retry_delay = settings.error_retry_delay_seconds

    def delay_for(self, attempt: int) -> float:
        return self.fast_delay if attempt <= self.fast_attempts else self.slow_delay

    def poll(self, job_id: str) -> Any:
        job = ExtractionJob(job_id=job_id)
        while job.attempts < self.max_attempts:
            job.attempts += 1
            log_extra = {"step": "poll", "job_id": job_id, "attempt": job.attempts}
            try:
                job.status = read_status(self.transport.status(job_id))
                logger.info("Snapshot status: %s", job.status or "unknown", extra={**log_extra, "status": job.status or "unknown"})

                if job.is_ready:
                    return self._download(job)
                if job.is_failed:
                    raise TerminalProviderError(status=job.status or "failed", job_id=job_id)
            except TransientNetworkError as e:
                logger.warning("Network issue while polling, retrying", extra={**log_extra, "error": str(e)})
                self._wait(job, self.network_retry_delay)
                continue
            except ProviderResponseError as e:
                logger.warning("Polling attempt failed, retrying", extra={**log_extra, "error": str(e)})
                self._wait(job, self.error_retry_delay)
                continue

            self._wait(job, self.delay_for(job.attempts))

        raise ExtractionTimeoutError(job_id=job_id, attempts=job.attempts)

    def _download(self, job: ExtractionJob) -> Any:
        data = self.transport.result(job.job_id)
        if isinstance(data, list):
            data = data[0] if data else None
        if not data:
            raise ProviderResponseError(f"Snapshot {job.job_id} is ready but returned no data")
        logger.info("Downloaded snapshot data", extra={"step": "result", "job_id": job.job_id, "attempt": job.attempts})
        return data

    def _wait(self, job: ExtractionJob, seconds: float) -> None:
        # No point sleeping once the budget is spent
        if job.attempts < self.max_attempts:
            self.sleep(seconds)
