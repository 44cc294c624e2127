from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv


def _load_env() -> None:
    # Centralized dotenv loading; safe if .env missing
    load_dotenv()


def _as_bool(value: str | None) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    # Provider credentials
    brightdata_api_key: str | None
    brightdata_dataset_id: str | None
    brightdata_base_url: str
    brightdata_status_path: str

    # Per-call timeouts
    sync_timeout_seconds: int
    trigger_timeout_seconds: int
    status_timeout_seconds: int
    result_timeout_seconds: int

    # Polling budget
    poll_max_attempts: int
    poll_fast_attempts: int
    poll_fast_delay_seconds: float
    poll_slow_delay_seconds: float
    network_retry_delay_seconds: float
    error_retry_delay_seconds: float

    # Core/runtime
    db_path: str
    run_env: str
    log_level: str
    extraction_workers: int

    # Logging/tracing
    provider_trace: bool = False
    provider_log_path: str = "logs/provider_calls.jsonl"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    _load_env()
    return Settings(
        brightdata_api_key=os.getenv("BRIGHT_DATA_API_KEY") or os.getenv("BRIGHT_DATA_API_TOKEN"),
        brightdata_dataset_id=os.getenv("BRIGHT_DATA_DATASET_ID"),
        brightdata_base_url=os.getenv("BRIGHT_DATA_BASE_URL", "https://api.brightdata.com").rstrip("/"),
        brightdata_status_path=os.getenv("BRIGHT_DATA_STATUS_PATH", "/datasets/v3/progress/{job_id}"),
        sync_timeout_seconds=int(os.getenv("SYNC_TIMEOUT_SECONDS", "120")),
        trigger_timeout_seconds=int(os.getenv("TRIGGER_TIMEOUT_SECONDS", "30")),
        status_timeout_seconds=int(os.getenv("STATUS_TIMEOUT_SECONDS", "15")),
        result_timeout_seconds=int(os.getenv("RESULT_TIMEOUT_SECONDS", "30")),
        poll_max_attempts=int(os.getenv("POLL_MAX_ATTEMPTS", "40")),
        poll_fast_attempts=int(os.getenv("POLL_FAST_ATTEMPTS", "20")),
        poll_fast_delay_seconds=float(os.getenv("POLL_FAST_DELAY_SECONDS", "8")),
        poll_slow_delay_seconds=float(os.getenv("POLL_SLOW_DELAY_SECONDS", "12")),
        network_retry_delay_seconds=float(os.getenv("NETWORK_RETRY_DELAY_SECONDS", "5")),
        error_retry_delay_seconds=float(os.getenv("ERROR_RETRY_DELAY_SECONDS", "8")),
        db_path=os.getenv("DB_PATH", "profiles.db"),
        run_env=os.getenv("RUN_ENV", "local"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        extraction_workers=int(os.getenv("EXTRACTION_WORKERS", "4")),
        provider_trace=_as_bool(os.getenv("PROVIDER_TRACE", "false")),
        provider_log_path=os.getenv("PROVIDER_LOG_PATH", "logs/provider_calls.jsonl"),
    )
