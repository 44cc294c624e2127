"""Bright Data datasets API v3 transport: sync scrape, trigger, status, snapshot download."""
from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

import requests

from config.settings import Settings, get_settings
from services.errors import (
    ConfigurationError,
    ProviderResponseError,
    TerminalProviderError,
    TransientNetworkError,
)
from utils.provider_logger import log_call


logger = logging.getLogger(__name__)

RETRYABLE_HTTP = (408, 429)
# A freshly triggered snapshot can be unknown to these endpoints for a short while
NOT_FOUND_RETRYABLE_OPERATIONS = ("status", "result")


class BrightDataClient:
    """Thin wrapper over requests that maps every failure onto services.errors."""

    def __init__(self, settings: Optional[Settings] = None, session: Optional[requests.Session] = None):
        self.settings = settings or get_settings()
        self.api_key = self.settings.brightdata_api_key
        self.dataset_id = self.settings.brightdata_dataset_id
        self.base_url = self.settings.brightdata_base_url
        self.api_calls_made = 0

        if not self.api_key or not self.dataset_id:
            raise ConfigurationError("BRIGHT_DATA_API_KEY and BRIGHT_DATA_DATASET_ID must be set")

        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        })

    def scrape(self, url: str) -> Any:
        """Blocking single-URL scrape. Returns None when the provider deferred the work (HTTP 202)."""
        response = self._request(
            "POST",
            "/datasets/v3/scrape",
            operation="scrape",
            timeout=self.settings.sync_timeout_seconds,
            params={"dataset_id": self.dataset_id, "format": "json"},
            body=[{"url": url}],
        )
        if response.status_code == 202:
            logger.info("Synchronous scrape deferred by provider", extra={"step": "scrape", "status": "deferred"})
            return None
        return self._json(response, "scrape")

    def trigger(self, url: str) -> Dict[str, Any]:
        response = self._request(
            "POST",
            "/datasets/v3/trigger",
            operation="trigger",
            timeout=self.settings.trigger_timeout_seconds,
            params={"dataset_id": self.dataset_id, "format": "json"},
            body=[{"url": url}],
        )
        data = self._json(response, "trigger")
        return data if isinstance(data, dict) else {}

    def status(self, job_id: str) -> Dict[str, Any]:
        path = self.settings.brightdata_status_path.format(job_id=job_id)
        response = self._request(
            "GET",
            path,
            operation="status",
            timeout=self.settings.status_timeout_seconds,
            job_id=job_id,
        )
        data = self._json(response, "status")
        return data if isinstance(data, dict) else {}

    def result(self, job_id: str) -> Any:
        response = self._request(
            "GET",
            f"/datasets/v3/snapshot/{job_id}",
            operation="result",
            timeout=self.settings.result_timeout_seconds,
            params={"format": "json"},
            job_id=job_id,
        )
        return self._json(response, "result")

    def get_api_usage(self) -> Dict[str, Any]:
        return {"api_calls_made": self.api_calls_made, "dataset_id": self.dataset_id}

    def _request(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        timeout: float,
        params: Optional[Dict[str, Any]] = None,
        body: Any = None,
        job_id: Optional[str] = None,
    ) -> requests.Response:
        endpoint = f"{self.base_url}{path}"
        t0 = time.time()
        try:
            response = self.session.request(method, endpoint, params=params, json=body, timeout=timeout)
        except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
            self._trace(operation, endpoint, job_id, None, t0, "error", str(e))
            raise TransientNetworkError(f"{operation} request failed: {e}") from e
        except requests.exceptions.RequestException as e:
            self._trace(operation, endpoint, job_id, None, t0, "error", str(e))
            raise ProviderResponseError(f"{operation} request failed: {e}") from e
        self.api_calls_made += 1

        code = response.status_code
        if code < 400:
            self._trace(operation, endpoint, job_id, code, t0, "ok", None)
            return response

        detail = (response.text or "")[:500]
        self._trace(operation, endpoint, job_id, code, t0, "error", detail)
        if code in RETRYABLE_HTTP or code >= 500 or (code == 404 and operation in NOT_FOUND_RETRYABLE_OPERATIONS):
            raise ProviderResponseError(f"{operation} failed with HTTP {code}: {detail}", http_status=code)
        raise TerminalProviderError(
            status=f"http_{code}",
            message=f"{operation} rejected with HTTP {code}: {detail}",
            job_id=job_id,
        )

    @staticmethod
    def _json(response: requests.Response, operation: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise ProviderResponseError(
                f"{operation} returned a non-JSON body", http_status=response.status_code
            ) from e

    @staticmethod
    def _trace(
        operation: str,
        endpoint: str,
        job_id: Optional[str],
        http_status: Optional[int],
        t0: float,
        status: str,
        error: Optional[str],
    ) -> None:
        log_call(
            caller=f"brightdata_client.{operation}",
            operation=operation,
            endpoint=endpoint,
            job_id=job_id,
            http_status=http_status,
            duration_ms=int((time.time() - t0) * 1000),
            status=status,
            error=error,
        )
