from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional


def _ensure_parent_dir(path: Path) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError:
        pass


def log_call(
    *,
    caller: str,
    operation: str,
    endpoint: str,
    job_id: Optional[str] = None,
    http_status: Optional[int] = None,
    duration_ms: Optional[int] = None,
    status: str = "ok",
    error: Optional[str] = None,
    extras: Optional[Dict[str, Any]] = None,
) -> None:
    """Append a single JSON line describing a provider HTTP call if tracing is enabled.

    Controlled by PROVIDER_TRACE / PROVIDER_LOG_PATH in config/settings.py
    """
    from config.settings import get_settings
    # Ensure latest env changes (tests may monkeypatch env between calls)
    get_settings.cache_clear()
    settings = get_settings()
    if not settings.provider_trace:
        return

    log_path = Path(settings.provider_log_path)
    _ensure_parent_dir(log_path)

    payload: Dict[str, Any] = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "caller": caller,
        "provider": "bright_data",
        "operation": operation,
        "endpoint": endpoint,
        "job_id": job_id,
        "http_status": http_status,
        "duration_ms": duration_ms,
        "status": status,
        "error": error,
    }
    run_id = os.getenv("RUN_ID")
    if run_id:
        payload["run_id"] = run_id

    if extras:
        # Shallow merge extras under a dedicated key to avoid collisions
        payload["extras"] = extras

    try:
        with log_path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(payload, ensure_ascii=False, default=str) + "\n")
    except OSError:
        # Never break the app on logging failures
        return
