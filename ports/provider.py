from __future__ import annotations

from typing import Any, Dict, Protocol


class ProviderTransport(Protocol):
    """Outbound calls the orchestrator and poller need; BrightDataClient is the real one."""

    def scrape(self, url: str) -> Any:
        ...

    def trigger(self, url: str) -> Dict[str, Any]:
        ...

    def status(self, job_id: str) -> Dict[str, Any]:
        ...

    def result(self, job_id: str) -> Any:
        ...
