import redis.asyncio as redis
from loguru import logger

from app.core.config import settings


class RedisService:
    """Thin async Redis wrapper. Operations log and degrade instead of raising."""

    def __init__(self, url: str | None = None, max_connections: int | None = None) -> None:
        self.url = url if url is not None else settings.REDIS_URL
        self.max_connections = max_connections or settings.REDIS_MAX_CONNECTIONS
        self._client: redis.Redis | None = None
        if not self.url:
            logger.warning("REDIS_URL is not set. Redis operations will fail until configured.")

    async def get_client(self) -> redis.Redis:
        if self._client is None:
            logger.info("Creating Redis client")
            self._client = redis.from_url(
                self.url,
                decode_responses=True,
                encoding="utf-8",
                socket_connect_timeout=5,
                socket_timeout=5,
                max_connections=self.max_connections,
                health_check_interval=30,
            )
        return self._client

    async def set(self, key: str, value: str, ttl: int | None = None) -> bool:
        """Store a string value, expiring after ``ttl`` seconds when given.

        Returns:
            True if the write was acknowledged, False otherwise
        """
        try:
            client = await self.get_client()
            if ttl is not None:
                result = await client.setex(key, ttl, value)
            else:
                result = await client.set(key, value)
            return bool(result)
        except (redis.RedisError, OSError) as exc:
            logger.error(f"Failed to set key '{key}' in Redis: {exc}")
            return False

    async def get(self, key: str) -> str | None:
        try:
            client = await self.get_client()
            return await client.get(key)
        except (redis.RedisError, OSError) as exc:
            logger.error(f"Failed to get key '{key}' from Redis: {exc}")
            return None

    async def delete(self, key: str) -> bool:
        try:
            client = await self.get_client()
            return bool(await client.delete(key))
        except (redis.RedisError, OSError) as exc:
            logger.error(f"Failed to delete key '{key}' from Redis: {exc}")
            return False

    async def push_capped(self, key: str, values: list[str], max_length: int) -> bool:
        """Prepend ``values`` to a list and trim it to its newest ``max_length`` entries.

        ``values`` are given oldest first, so the last one ends up at the head.
        """
        if not values:
            return True
        try:
            client = await self.get_client()
            async with client.pipeline(transaction=True) as pipe:
                pipe.lpush(key, *values)
                pipe.ltrim(key, 0, max_length - 1)
                await pipe.execute()
            return True
        except (redis.RedisError, OSError) as exc:
            logger.error(f"Failed to push to list '{key}' in Redis: {exc}")
            return False

    async def list_range(self, key: str, limit: int) -> list[str] | None:
        """Newest ``limit`` entries of a list, or None if Redis could not be read."""
        try:
            client = await self.get_client()
            return await client.lrange(key, 0, limit - 1)
        except (redis.RedisError, OSError) as exc:
            logger.error(f"Failed to read list '{key}' from Redis: {exc}")
            return None

    async def delete_by_pattern(self, pattern: str) -> int:
        """Delete all keys matching a pattern.

        Args:
            pattern: Redis key pattern (e.g., "picknext:recs:*")

        Returns:
            Number of keys deleted
        """
        try:
            client = await self.get_client()
            deleted_count = 0
            batch = []
            async for key in client.scan_iter(match=pattern, count=500):
                batch.append(key)
                if len(batch) >= 500:
                    deleted_count += await client.delete(*batch)
                    batch = []
            if batch:
                deleted_count += await client.delete(*batch)
            return deleted_count
        except (redis.RedisError, OSError) as exc:
            logger.error(f"Failed to delete keys matching pattern '{pattern}' in Redis: {exc}")
            return 0

    async def close(self) -> None:
        if self._client is not None:
            try:
                await self._client.aclose()
                logger.info("Redis client closed")
            except (redis.RedisError, OSError) as exc:
                logger.warning(f"Failed to close Redis client: {exc}")
            finally:
                self._client = None
