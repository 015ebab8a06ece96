"""Shared quote batch cache backed by Redis.

One key holds a whole batch as a JSON array. Writes replace the entry
wholesale (last writer wins) and expiry is left to Redis' own TTL, so both
the API and the worker can write the key without coordinating.
"""

import logging

import redis
from pydantic import ValidationError

from errors import CacheCorruptError, CacheUnavailableError
from models import Quote, decode_batch, encode_batch

logger = logging.getLogger(__name__)

QUOTE_BATCH_KEY = "quote_batch"


class BatchCache:
    def __init__(self, client: redis.Redis):
        self._client = client

    def get(self, key: str = QUOTE_BATCH_KEY) -> list[Quote] | None:
        """Return the cached batch, or None when the key is absent or expired."""
        try:
            payload = self._client.get(key)
        except redis.RedisError as e:
            raise CacheUnavailableError(f"Cache read failed for {key}: {e}") from e

        if payload is None:
            return None
        try:
            return decode_batch(payload)
        except ValidationError as e:
            raise CacheCorruptError(f"Undecodable batch under {key}") from e

    def set(self, key: str, batch: list[Quote], ttl_seconds: int) -> None:
        try:
            self._client.set(key, encode_batch(batch), ex=ttl_seconds)
        except redis.RedisError as e:
            raise CacheUnavailableError(f"Cache write failed for {key}: {e}") from e

    def check_connection(self) -> bool:
        try:
            return bool(self._client.ping())
        except redis.RedisError as e:
            logger.warning("Cache ping failed: %s", e)
            return False

    def close(self) -> None:
        self._client.close()
