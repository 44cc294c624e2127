"""Failure taxonomy for profile extraction.

Every failure leaving the orchestrator is one of these classes; the extraction
pipeline stores ``error_type`` and the message on the failed status record.
"""
from __future__ import annotations

from typing import Optional


class ExtractionError(Exception):
    error_type = "extraction_error"


class ConfigurationError(ExtractionError):
    """Provider credentials or dataset are missing. Not retried."""

    error_type = "configuration_error"


class TriggerError(ExtractionError):
    """The provider rejected job creation or returned no job identifier."""

    error_type = "trigger_error"


class TransientNetworkError(ExtractionError):
    """DNS/connection failure or client-side timeout; retried while polling."""

    error_type = "transient_network_error"


class ProviderResponseError(ExtractionError):
    """Retryable provider response problem: 5xx, 408/429, malformed or empty body."""

    error_type = "provider_response_error"

    def __init__(self, message: str, http_status: Optional[int] = None) -> None:
        super().__init__(message)
        self.http_status = http_status


class TerminalProviderError(ExtractionError):
    """The provider reported the job as failed, or refused the request outright."""

    error_type = "terminal_provider_error"

    def __init__(self, status: str, message: Optional[str] = None, job_id: Optional[str] = None) -> None:
        super().__init__(message or f"Extraction failed with status: {status}")
        self.status = status
        self.job_id = job_id


class ExtractionTimeoutError(ExtractionError, TimeoutError):
    """Polling budget exhausted without a terminal status."""

    error_type = "timeout_error"

    def __init__(self, job_id: str, attempts: int) -> None:
        super().__init__(f"Job {job_id} did not finish after {attempts} polling attempts")
        self.job_id = job_id
        self.attempts = attempts


class NormalizationError(ExtractionError):
    error_type = "normalization_error"


class PersistenceError(ExtractionError):
    """The profile could not be stored; the status record is left 'failed' for a retry."""

    error_type = "persistence_error"

    def __init__(self, message: str, job_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.job_id = job_id
