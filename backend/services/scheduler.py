"""Background cache refresh and maintenance scheduler for the worker process.

A single daemon thread waits on two timers and a stop event, dispatching at
most one job per loop iteration, so a cache refresh and a maintenance run
never overlap. The refresh timer fires once at start so the cache is warm
before any request arrives.
"""

import logging
import threading
import time
from typing import Callable

from errors import CacheError, StoreUnavailableError
from models import Connectivity
from services.cache import QUOTE_BATCH_KEY, BatchCache
from services.store import QuoteStore

logger = logging.getLogger(__name__)

CLEANUP_DURATION_SECONDS = 5.0


def simulate_cleanup(duration_seconds: float = CLEANUP_DURATION_SECONDS) -> None:
    """Simulated cleanup job. Blocks for ``duration_seconds``."""
    logger.debug("Cleanup job started")
    start = time.monotonic()
    time.sleep(duration_seconds)
    logger.debug("Cleanup job completed in %.2fs", time.monotonic() - start)


def _next_fire(due: float, period: float, now: float) -> float:
    """Advance a timer by one period.

    Fires missed while a job was running collapse into a single pending fire,
    like a ticker with a one-slot buffer.
    """
    nxt = due + period
    return now if nxt <= now else nxt


class RefreshScheduler:
    def __init__(
        self,
        store: QuoteStore,
        cache: BatchCache,
        batch_size: int = 500,
        cache_ttl_seconds: int = 300,
        maintenance_interval_seconds: float = 60.0,
        maintenance_job: Callable[[], None] = simulate_cleanup,
        refresh_interval_seconds: float | None = None,
    ):
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self._store = store
        self._cache = cache
        self._batch_size = batch_size
        self._cache_ttl_seconds = cache_ttl_seconds
        # Refreshing once per TTL keeps the entry alive at steady state.
        self._refresh_interval = (
            refresh_interval_seconds if refresh_interval_seconds is not None else cache_ttl_seconds
        )
        self._maintenance_interval = maintenance_interval_seconds
        self._maintenance_job = maintenance_job
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            raise RuntimeError("Scheduler already running")
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="refresh-scheduler", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        """Stop scheduling new jobs. A job already running is not interrupted."""
        self._stop_event.set()
        if self._thread is not None and timeout is not None:
            self._thread.join(timeout)

    def _run(self) -> None:
        logger.info(
            "Scheduler started (cache refresh every %ss, maintenance every %ss)",
            self._refresh_interval,
            self._maintenance_interval,
        )
        now = time.monotonic()
        next_refresh = now
        next_maintenance = now + self._maintenance_interval

        while True:
            due = min(next_refresh, next_maintenance)
            if self._stop_event.wait(max(0.0, due - time.monotonic())):
                break

            if next_refresh <= next_maintenance:
                self.refresh_cache()
                next_refresh = _next_fire(next_refresh, self._refresh_interval, time.monotonic())
            else:
                self.run_maintenance()
                next_maintenance = _next_fire(
                    next_maintenance, self._maintenance_interval, time.monotonic()
                )

        logger.info("Scheduler stopped")

    def refresh_cache(self) -> bool:
        """Fetch a fresh batch and overwrite the cached one. Returns True on success."""
        logger.info(
            "Refreshing quote cache (batch_size=%d, ttl=%ds)",
            self._batch_size,
            self._cache_ttl_seconds,
        )
        try:
            batch = self._store.fetch_random_batch(self._batch_size)
            self._cache.set(QUOTE_BATCH_KEY, batch, self._cache_ttl_seconds)
        except (StoreUnavailableError, CacheError) as e:
            logger.error("Quote cache refresh failed: %s", e)
            return False
        except Exception:
            logger.exception("Quote cache refresh failed unexpectedly")
            return False

        logger.info("Quote cache refreshed with %d quotes", len(batch))
        return True

    def run_maintenance(self) -> None:
        try:
            self._maintenance_job()
        except Exception:
            logger.exception("Maintenance job failed")

    def check_connection(self) -> Connectivity:
        return Connectivity(
            store=self._store.check_connection(),
            cache=self._cache.check_connection(),
        )
