"""Redis implementation of the tagged cache."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from redis.exceptions import RedisError

from ...exceptions import CacheStoreError
from ..serialization import PickleSerializer

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from redis.asyncio import Redis

    from ..serialization import ISerializer

logger = logging.getLogger("criteria_repository.redis_cache")


class RedisTaggedCache:
    """
    Redis implementation of ITaggedCache.

    Layout:
    - entry: ``{prefix}:{tag}:{key}`` holding the serialized value (SETEX)
    - tag:   ``{prefix}:tag:{tag}``, a set of the entry keys written under it

    ``flush`` reads the tag set and deletes every member together with the
    set itself. Redis and serializer failures are logged and re-raised as
    ``CacheStoreError``.
    """

    def __init__(
        self,
        redis_client: Redis[bytes],
        serializer: ISerializer | None = None,
        prefix: str = "criteria_repository",
    ) -> None:
        self._redis = redis_client
        self._serializer = serializer or PickleSerializer()
        self._prefix = prefix

    def entry_key(self, key: str, tag: str) -> str:
        return f"{self._prefix}:{tag}:{key}"

    def tag_key(self, tag: str) -> str:
        return f"{self._prefix}:tag:{tag}"

    async def remember(
        self,
        key: str,
        ttl: int,
        tag: str,
        compute: Callable[[], Awaitable[Any]],
    ) -> Any:
        entry_key = self.entry_key(key, tag)
        try:
            raw = await self._redis.get(entry_key)
        except RedisError as e:
            logger.error("Redis get failed for key %s: %s", entry_key, e)
            raise CacheStoreError("get", key, str(e)) from e

        if raw is not None:
            return self._loads(key, raw)

        value = await compute()
        if ttl <= 0:
            return value

        payload = self._dumps(key, value)
        try:
            async with self._redis.pipeline(transaction=True) as pipe:
                pipe.setex(entry_key, ttl, payload)
                pipe.sadd(self.tag_key(tag), entry_key)
                await pipe.execute()
        except RedisError as e:
            logger.error("Redis set failed for key %s: %s", entry_key, e)
            raise CacheStoreError("set", key, str(e)) from e
        return value

    async def forget(self, key: str, tag: str) -> None:
        entry_key = self.entry_key(key, tag)
        try:
            async with self._redis.pipeline(transaction=True) as pipe:
                pipe.delete(entry_key)
                pipe.srem(self.tag_key(tag), entry_key)
                await pipe.execute()
        except RedisError as e:
            logger.error("Redis forget failed for key %s: %s", entry_key, e)
            raise CacheStoreError("forget", key, str(e)) from e

    async def flush(self, tag: str) -> None:
        tag_key = self.tag_key(tag)
        try:
            members = await self._redis.smembers(tag_key)
            await self._redis.delete(*members, tag_key)
        except RedisError as e:
            logger.error("Redis flush failed for tag %s: %s", tag, e)
            raise CacheStoreError("flush", tag_key, str(e)) from e
        logger.debug("Flushed %d entries under tag %s", len(members), tag)

    def _dumps(self, key: str, value: Any) -> bytes:
        try:
            return self._serializer.dumps(value)
        except Exception as e:  # noqa: BLE001
            logger.warning("Cache serialization failed for key %s: %s", key, e)
            raise CacheStoreError("serialize", key, str(e)) from e

    def _loads(self, key: str, raw: bytes) -> Any:
        try:
            return self._serializer.loads(raw)
        except Exception as e:  # noqa: BLE001
            logger.warning("Cache deserialization failed for key %s: %s", key, e)
            raise CacheStoreError("deserialize", key, str(e)) from e
