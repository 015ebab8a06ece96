"""Process-wide dependencies, built once at startup and passed down explicitly."""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

import redis

from config import Settings
from errors import StoreUnavailableError
from services.cache import BatchCache
from services.store import QuoteStore, create_store_engine

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    store: QuoteStore
    cache: BatchCache
    batch_size: int = 500
    cache_ttl_seconds: int = 300
    maintenance_interval_seconds: float = 60.0
    executor: ThreadPoolExecutor = field(
        default_factory=lambda: ThreadPoolExecutor(max_workers=4, thread_name_prefix="cache-writer")
    )

    def close(self) -> None:
        # Pending cache writes are dropped; the next miss or refresh repopulates.
        self.executor.shutdown(wait=False, cancel_futures=True)
        self.cache.close()
        self.store.close()


def build_context(settings: Settings) -> AppContext:
    """Connect to the store and cache. Raises StoreUnavailableError if the store is unreachable."""
    store = QuoteStore(
        create_store_engine(settings.database_url, timeout_seconds=settings.store_timeout_seconds)
    )
    if not store.check_connection():
        store.close()
        raise StoreUnavailableError("Could not connect to the quote store at startup")

    client = redis.Redis.from_url(
        settings.redis_url,
        socket_connect_timeout=5,
        socket_timeout=5,
        health_check_interval=30,
    )
    cache = BatchCache(client)
    logger.info("Quote store and cache clients initialized")

    return AppContext(
        store=store,
        cache=cache,
        batch_size=settings.quote_batch_size,
        cache_ttl_seconds=settings.quote_cache_ttl_seconds,
        maintenance_interval_seconds=settings.scheduler_interval_minutes * 60,
    )
