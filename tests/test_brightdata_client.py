from __future__ import annotations

import dataclasses
from typing import Any, Dict, List

import pytest
import requests

from config.settings import get_settings
from services.brightdata_client import BrightDataClient
from services.errors import (
    ConfigurationError,
    ProviderResponseError,
    TerminalProviderError,
    TransientNetworkError,
)


class _FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: str = ""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class _FakeSession:
    def __init__(self, outcomes: List[Any]):
        self.headers: Dict[str, str] = {}
        self.outcomes = list(outcomes)
        self.requests: List[Dict[str, Any]] = []

    def request(self, method, url, params=None, json=None, timeout=None):
        self.requests.append({"method": method, "url": url, "params": params, "json": json, "timeout": timeout})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _settings(**overrides):
    base = dataclasses.replace(
        get_settings(),
        brightdata_api_key="key-123",
        brightdata_dataset_id="gd_profiles",
        brightdata_base_url="https://api.example.test",
        brightdata_status_path="/datasets/v3/progress/{job_id}",
        provider_trace=False,
    )
    return dataclasses.replace(base, **overrides)


def _client(*outcomes, **overrides):
    session = _FakeSession(list(outcomes))
    return BrightDataClient(settings=_settings(**overrides), session=session), session


def test_missing_credentials_raise_configuration_error():
    with pytest.raises(ConfigurationError):
        BrightDataClient(settings=_settings(brightdata_api_key=None), session=_FakeSession([]))
    with pytest.raises(ConfigurationError):
        BrightDataClient(settings=_settings(brightdata_dataset_id=""), session=_FakeSession([]))


def test_auth_header_and_trigger_request():
    client, session = _client(_FakeResponse(200, {"snapshot_id": "s_1"}))

    assert client.trigger("https://linkedin.com/in/jdoe") == {"snapshot_id": "s_1"}

    assert session.headers["Authorization"] == "Bearer key-123"
    req = session.requests[0]
    assert req["method"] == "POST"
    assert req["url"] == "https://api.example.test/datasets/v3/trigger"
    assert req["params"] == {"dataset_id": "gd_profiles", "format": "json"}
    assert req["json"] == [{"url": "https://linkedin.com/in/jdoe"}]
    assert req["timeout"] == client.settings.trigger_timeout_seconds
    assert client.get_api_usage()["api_calls_made"] == 1


def test_scrape_deferred_returns_none():
    client, _ = _client(_FakeResponse(202, {"snapshot_id": "s_2"}))
    assert client.scrape("https://linkedin.com/in/jdoe") is None


def test_status_uses_configured_path():
    client, session = _client(_FakeResponse(200, {"Status": "ready"}), brightdata_status_path="/v3/jobs/{job_id}/state")
    assert client.status("s_3") == {"Status": "ready"}
    assert session.requests[0]["url"] == "https://api.example.test/v3/jobs/s_3/state"
    assert session.requests[0]["method"] == "GET"


def test_result_downloads_snapshot():
    client, session = _client(_FakeResponse(200, [{"name": "Jane"}]))
    assert client.result("s_4") == [{"name": "Jane"}]
    assert session.requests[0]["url"] == "https://api.example.test/datasets/v3/snapshot/s_4"


@pytest.mark.parametrize("exc", [requests.exceptions.ConnectionError("refused"), requests.exceptions.ReadTimeout("slow")])
def test_network_failures_are_transient(exc):
    client, _ = _client(exc)
    with pytest.raises(TransientNetworkError):
        client.status("s_5")


@pytest.mark.parametrize("code", [500, 503, 429, 408])
def test_server_errors_are_retryable(code):
    client, _ = _client(_FakeResponse(code, text="busy"))
    with pytest.raises(ProviderResponseError) as exc:
        client.status("s_6")
    assert exc.value.http_status == code


@pytest.mark.parametrize("code", [400, 401, 403])
def test_client_errors_are_terminal(code):
    client, _ = _client(_FakeResponse(code, text="nope"))
    with pytest.raises(TerminalProviderError) as exc:
        client.status("s_7")
    assert exc.value.status == f"http_{code}"
    assert exc.value.job_id == "s_7"


def test_non_json_body_is_retryable():
    client, _ = _client(_FakeResponse(200, None, text="<html>"))
    with pytest.raises(ProviderResponseError):
        client.result("s_8")


@pytest.mark.parametrize("call", ["status", "result"])
def test_not_found_while_polling_is_retryable(call):
    client, _ = _client(_FakeResponse(404, text="not found"))
    with pytest.raises(ProviderResponseError) as exc:
        getattr(client, call)("s_new")
    assert exc.value.http_status == 404


def test_not_found_on_trigger_is_terminal():
    client, _ = _client(_FakeResponse(404, text="no such dataset"))
    with pytest.raises(TerminalProviderError) as exc:
        client.trigger("https://linkedin.com/in/jdoe")
    assert exc.value.status == "http_404"


def test_poller_waits_out_snapshot_not_found():
    from services.job_poller import JobPoller

    client, session = _client(
        _FakeResponse(404, text="not found"),
        _FakeResponse(200, {"status": "ready"}),
        _FakeResponse(200, [{"name": "Jane Doe"}]),
    )
    sleeps = []
    poller = JobPoller(client, settings=_settings(error_retry_delay_seconds=8), sleep=sleeps.append)

    assert poller.poll("s_new") == {"name": "Jane Doe"}
    assert sleeps == [8]
    assert [r["method"] for r in session.requests] == ["GET", "GET", "GET"]
