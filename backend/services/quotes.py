"""Cache-aside read path for random quotes.

Cache first; on a miss, an empty batch, a corrupt entry or a cache outage,
fall back to the store, serve one quote from the fetched batch and hand the
whole batch to a background executor to repopulate the cache. The response
never waits on that write.
"""

import logging
import random
from concurrent.futures import Executor, Future
from enum import Enum

from errors import CacheError, QuoteNotFoundError
from models import Connectivity, Quote
from services.cache import QUOTE_BATCH_KEY, BatchCache
from services.store import QuoteStore

logger = logging.getLogger(__name__)


class QuoteSource(str, Enum):
    CACHE = "cache"
    STORE = "store"


class QuoteReader:
    def __init__(
        self,
        store: QuoteStore,
        cache: BatchCache,
        executor: Executor,
        batch_size: int = 500,
        cache_ttl_seconds: int = 300,
        rng: random.Random | None = None,
    ):
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self._store = store
        self._cache = cache
        self._executor = executor
        self._batch_size = batch_size
        self._cache_ttl_seconds = cache_ttl_seconds
        self._rng = rng or random.Random()

    def get_random_quote(self) -> tuple[Quote, QuoteSource]:
        """Pick one quote, preferring the cached batch.

        Raises StoreUnavailableError when the cache cannot serve and the store
        query fails, QuoteNotFoundError when the store has no quotes.
        """
        batch = self._cached_batch()
        if batch:
            return self._rng.choice(batch), QuoteSource.CACHE

        batch = self._store.fetch_random_batch(self._batch_size)
        if not batch:
            raise QuoteNotFoundError()

        quote = self._rng.choice(batch)
        self._schedule_cache_write(batch)
        return quote, QuoteSource.STORE

    def _cached_batch(self) -> list[Quote] | None:
        try:
            return self._cache.get(QUOTE_BATCH_KEY)
        except CacheError as e:
            logger.warning("Quote cache unusable, falling back to store: %s", e)
            return None

    def _schedule_cache_write(self, batch: list[Quote]) -> None:
        try:
            future = self._executor.submit(
                self._cache.set, QUOTE_BATCH_KEY, batch, self._cache_ttl_seconds
            )
        except RuntimeError as e:
            # Executor already shut down; the process is exiting.
            logger.warning("Skipping quote cache write: %s", e)
            return
        future.add_done_callback(_log_cache_write)

    def check_connection(self) -> Connectivity:
        return Connectivity(
            store=self._store.check_connection(),
            cache=self._cache.check_connection(),
        )


def _log_cache_write(future: Future) -> None:
    if future.cancelled():
        logger.warning("Background quote cache write cancelled")
        return
    exc = future.exception()
    if exc is not None:
        logger.warning("Background quote cache write failed: %s", exc)
    else:
        logger.debug("Quote cache populated from read path")
