from __future__ import annotations

import dataclasses
from typing import Any, Dict, List

import pytest

from config.settings import get_settings
from services.errors import (
    ConfigurationError,
    ExtractionError,
    ExtractionTimeoutError,
    NormalizationError,
    ProviderResponseError,
    TerminalProviderError,
    TriggerError,
)
from services.job_poller import JobPoller
from services.orchestrator import ExtractionOrchestrator


PROFILE = {"name": "Jane Doe", "position": "Engineer", "followers": "1.2K"}


class _FakeTransport:
    def __init__(self, scrape: Any = None, trigger: Any = None, statuses: List[Dict[str, Any]] | None = None):
        self._scrape = scrape
        self._trigger = trigger if trigger is not None else {"snapshot_id": "s_abc"}
        self._statuses = list(statuses or [{"status": "ready"}])
        self.calls: List[str] = []
        self.scraped_urls: List[str] = []

    def scrape(self, url: str) -> Any:
        self.calls.append("scrape")
        self.scraped_urls.append(url)
        if isinstance(self._scrape, Exception):
            raise self._scrape
        return self._scrape

    def trigger(self, url: str) -> Dict[str, Any]:
        self.calls.append("trigger")
        if isinstance(self._trigger, Exception):
            raise self._trigger
        return self._trigger

    def status(self, job_id: str) -> Dict[str, Any]:
        self.calls.append("status")
        return self._statuses.pop(0)

    def result(self, job_id: str) -> Any:
        self.calls.append("result")
        return [PROFILE]


def _orchestrator(transport, **overrides):
    settings = dataclasses.replace(get_settings(), **overrides)
    return ExtractionOrchestrator(transport, poller=JobPoller(transport, settings=settings, sleep=lambda s: None))


def test_sync_success_skips_async():
    transport = _FakeTransport(scrape=[PROFILE])
    result = _orchestrator(transport).extract("www.linkedin.com/in/jane-doe/")

    assert result.method == "sync"
    assert result.job_id is None
    assert result.profile.full_name == "Jane Doe"
    assert result.profile.followers_count == 1200
    assert transport.calls == ["scrape"]
    assert transport.scraped_urls == ["https://www.linkedin.com/in/jane-doe"]


@pytest.mark.parametrize(
    "sync_outcome",
    [None, [], {}, ProviderResponseError("HTTP 502", http_status=502), TerminalProviderError(status="http_400")],
)
def test_sync_failure_falls_back_to_async(sync_outcome):
    transport = _FakeTransport(scrape=sync_outcome, statuses=[{"status": "running"}, {"status": "ready"}])
    result = _orchestrator(transport).extract("https://linkedin.com/in/jane-doe")

    assert result.method == "async"
    assert result.job_id == "s_abc"
    assert result.profile.full_name == "Jane Doe"
    assert transport.calls == ["scrape", "trigger", "status", "status", "result"]


def test_alternate_job_id_key():
    transport = _FakeTransport(trigger={"snapshotId": "s_camel"})
    assert _orchestrator(transport).extract("linkedin.com/in/x").job_id == "s_camel"


def test_missing_snapshot_id_is_trigger_error():
    transport = _FakeTransport(trigger={"message": "queued"})
    with pytest.raises(TriggerError):
        _orchestrator(transport).extract("linkedin.com/in/x")
    assert "status" not in transport.calls


def test_rejected_trigger_is_trigger_error():
    transport = _FakeTransport(trigger=TerminalProviderError(status="http_401"))
    with pytest.raises(TriggerError) as exc:
        _orchestrator(transport).extract("linkedin.com/in/x")
    assert isinstance(exc.value.__cause__, TerminalProviderError)


def test_configuration_error_propagates():
    transport = _FakeTransport(scrape=ConfigurationError("no key"))
    with pytest.raises(ConfigurationError):
        _orchestrator(transport).extract("linkedin.com/in/x")
    assert transport.calls == ["scrape"]


def test_poll_timeout_surfaces():
    transport = _FakeTransport(statuses=[{"status": "running"}] * 3)
    with pytest.raises(ExtractionTimeoutError):
        _orchestrator(transport, poll_max_attempts=3).extract("linkedin.com/in/x")


def test_unclassified_transport_failure_is_wrapped():
    class _BrokenTransport(_FakeTransport):
        def status(self, job_id: str) -> Dict[str, Any]:
            raise RuntimeError("socket closed unexpectedly")

    with pytest.raises(ExtractionError) as exc:
        _orchestrator(_BrokenTransport()).extract("linkedin.com/in/x")
    assert exc.value.error_type == "extraction_error"
    assert isinstance(exc.value.__cause__, RuntimeError)


def test_invalid_url_is_trigger_error():
    transport = _FakeTransport()
    with pytest.raises(TriggerError):
        _orchestrator(transport).extract("   ")
    assert transport.calls == []


def test_unusable_payload_is_normalization_error(monkeypatch):
    import services.orchestrator as orchestrator_module

    def _explode(raw):
        raise KeyError("name")

    monkeypatch.setattr(orchestrator_module, "normalize", _explode)
    with pytest.raises(NormalizationError):
        _orchestrator(_FakeTransport(scrape=[PROFILE])).extract("linkedin.com/in/x")
