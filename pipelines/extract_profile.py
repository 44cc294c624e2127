from __future__ import annotations

import sqlite3
from typing import Any, Optional

from db import schema
from db.connection import get_connection
from pipelines.runner import Pipeline, RunContext
from pipelines.steps import NormalizeScraped, PersistProfile, ReserveExtraction, RunExtraction
from services.orchestrator import ExtractionOrchestrator


def extract_profile(
    conn: sqlite3.Connection,
    orchestrator: ExtractionOrchestrator,
    user_id: str,
    target_url: str,
    *,
    is_own_profile: bool = False,
    retry: bool = False,
) -> RunContext:
    """Dedup gate -> orchestrator -> persistence for one (user, target) pair.

    Returns the run context: ``already_exists`` for duplicates, ``error`` for
    classified failures (already persisted as 'failed'), ``result`` on success.
    """
    ctx = RunContext(user_id=str(user_id), target_url=target_url, is_own_profile=is_own_profile, retry=retry)
    pipeline = Pipeline([
        ReserveExtraction(conn),
        RunExtraction(conn, orchestrator),
        PersistProfile(conn),
    ])
    return pipeline.run(ctx)


def ingest_scraped_profile(
    conn: sqlite3.Connection,
    user_id: str,
    target_url: str,
    payload: Any,
    *,
    is_own_profile: bool = False,
) -> RunContext:
    """Same gate and persistence for data the browser extension already scraped."""
    ctx = RunContext(user_id=str(user_id), target_url=target_url, is_own_profile=is_own_profile)
    pipeline = Pipeline([
        ReserveExtraction(conn),
        NormalizeScraped(conn, payload),
        PersistProfile(conn),
    ])
    return pipeline.run(ctx)


class ExtractionRunner:
    """Runs extract_profile on a private SQLite connection so it can execute on any worker thread."""

    def __init__(self, db_path: str, orchestrator: ExtractionOrchestrator, timeout: Optional[float] = 30.0) -> None:
        self.db_path = db_path
        self.orchestrator = orchestrator
        self.timeout = timeout

    def bootstrap(self) -> None:
        conn = get_connection(self.db_path, timeout=self.timeout)
        try:
            schema.bootstrap(conn)
        finally:
            conn.close()

    def run(self, user_id: str, target_url: str, *, is_own_profile: bool = False, retry: bool = False) -> RunContext:
        conn = get_connection(self.db_path, timeout=self.timeout)
        try:
            return extract_profile(
                conn, self.orchestrator, user_id, target_url, is_own_profile=is_own_profile, retry=retry
            )
        finally:
            conn.close()
