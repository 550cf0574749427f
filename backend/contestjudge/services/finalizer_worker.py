"""Background scheduler for periodic contest finalization."""

from __future__ import annotations

import logging
import threading
import time
from datetime import datetime
from typing import Callable, Optional

from prometheus_client import Counter
from sqlalchemy.orm import Session

from contestjudge.config import settings
from contestjudge.core.database import SessionLocal
from contestjudge.services.contest_finalizer import ContestFinalizer, FinalizationReport, contest_finalizer

logger = logging.getLogger(__name__)

FINALIZED_CONTESTS = Counter(
    "contestjudge_finalized_contests_total",
    "Contests whose final standings were committed",
)
FAILED_FINALIZATIONS = Counter(
    "contestjudge_failed_finalizations_total",
    "Contest finalizations rolled back after an error",
)
SKIPPED_TICKS = Counter(
    "contestjudge_finalizer_skipped_ticks_total",
    "Finalizer ticks skipped because the previous tick was still running",
)


class FinalizerWorker:
    """Timer-driven contest finalizer with single-flight ticks."""

    def __init__(
        self,
        finalizer: Optional[ContestFinalizer] = None,
        session_factory: Callable[[], Session] = SessionLocal,
        clock: Callable[[], datetime] = datetime.utcnow,
        interval_seconds: Optional[float] = None,
    ) -> None:
        self._finalizer = finalizer or contest_finalizer
        self._session_factory = session_factory
        self._clock = clock
        self._interval = interval_seconds
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._tick_lock = threading.Lock()
        self._heartbeat: float = 0.0
        self._tick_count: int = 0
        self._skipped_count: int = 0
        self._last_report: Optional[FinalizationReport] = None

    @property
    def interval(self) -> float:
        if self._interval is None:
            return settings.FINALIZER_INTERVAL_SECONDS
        return self._interval

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run_loop, name="contest-finalizer", daemon=True)
        self._thread.start()
        logger.info("Contest finalizer started (interval %.0fs)", self.interval)

    def stop(self) -> None:
        self._stop_event.set()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5)
        logger.info("Contest finalizer stopped")

    def status(self) -> dict:
        return {
            "running": self.is_running(),
            "busy": self._tick_lock.locked(),
            "last_heartbeat": self._heartbeat,
            "tick_count": self._tick_count,
            "skipped_count": self._skipped_count,
            "last_report": self._last_report.to_dict() if self._last_report else None,
        }

    def _run_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.tick()
            except Exception as exc:
                logger.exception("Contest finalizer tick failed: %s", exc)
            self._stop_event.wait(max(0.1, self.interval))

    def tick(self) -> Optional[FinalizationReport]:
        """
        Run one finalization pass.

        Returns None without doing anything when another tick is still in
        progress, so overlapping runs never race on the same contest.
        """
        if not self._tick_lock.acquire(blocking=False):
            self._skipped_count += 1
            SKIPPED_TICKS.inc()
            logger.warning("Previous finalizer tick still running; skipping")
            return None

        try:
            db = self._session_factory()
            try:
                report = self._finalizer.finalize_expired_contests(db, now=self._clock())
            finally:
                db.close()

            FINALIZED_CONTESTS.inc(len(report.finalized))
            FAILED_FINALIZATIONS.inc(len(report.failed))
            self._last_report = report
            self._tick_count += 1
            self._heartbeat = time.time()
            return report
        finally:
            self._tick_lock.release()


finalizer_worker = FinalizerWorker()
