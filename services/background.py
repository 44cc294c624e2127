from __future__ import annotations

import concurrent.futures as _fut
import logging
import threading
from typing import Optional, Set

from pipelines.extract_profile import ExtractionRunner
from pipelines.runner import RunContext


logger = logging.getLogger(__name__)


class BackgroundExtractor:
    """Detached extraction jobs.

    ``submit`` hands the work to a thread pool and returns at once; the job
    polls, normalizes and persists whether or not anyone waits on the future.
    Only unfinished futures are tracked.
    """

    def __init__(self, runner: ExtractionRunner, max_workers: int = 4) -> None:
        self.runner = runner
        self._executor = _fut.ThreadPoolExecutor(max_workers=max(1, max_workers), thread_name_prefix="extract")
        self._pending: Set[_fut.Future] = set()
        self._lock = threading.Lock()

    def submit(
        self,
        user_id: str,
        target_url: str,
        *,
        is_own_profile: bool = False,
        retry: bool = False,
    ) -> "_fut.Future[RunContext]":
        future = self._executor.submit(
            self.runner.run, user_id, target_url, is_own_profile=is_own_profile, retry=retry
        )
        with self._lock:
            self._pending.add(future)
        # Runs immediately if the job already finished
        future.add_done_callback(self._on_done)
        return future

    def pending(self) -> int:
        with self._lock:
            return len(self._pending)

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None) -> None:
        if wait and timeout is not None:
            with self._lock:
                futures = list(self._pending)
            _fut.wait(futures, timeout=timeout)
        self._executor.shutdown(wait=wait)

    def _on_done(self, future: "_fut.Future[RunContext]") -> None:
        with self._lock:
            self._pending.discard(future)
        self._log_outcome(future)

    @staticmethod
    def _log_outcome(future: "_fut.Future[RunContext]") -> None:
        exc = future.exception()
        if exc is not None:
            logger.error("Background extraction crashed: %s", exc, extra={"step": "background", "status": "crashed"})
            return
        ctx = future.result()
        status = "duplicate" if ctx.already_exists else ("failed" if ctx.error else "completed")
        logger.info(
            "Background extraction finished for %s", ctx.normalized_url,
            extra={"step": "background", "status": status},
        )
