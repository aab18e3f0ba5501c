import json
from typing import Any, List, Optional

import redis.asyncio as redis
import structlog

from barber_availability.core.config import settings

logger = structlog.get_logger(__name__)


class RedisClient:
    """Redis client for the shared availability cache.

    Read and write failures are logged and reported as a miss (``None`` or
    ``False``) so a cache outage never fails an availability request.
    """

    def __init__(self, url: Optional[str] = None):
        self.url = url
        self.redis_pool = None

    async def init_redis(self):
        """Initialize Redis connection pool."""
        url = self.url or settings.REDIS_URL
        if not url:
            raise RuntimeError("REDIS_URL is not configured")
        try:
            self.redis_pool = redis.ConnectionPool.from_url(
                url,
                decode_responses=True,
                retry_on_timeout=True,
                socket_keepalive=True,
            )

            # Test connection
            async with redis.Redis(connection_pool=self.redis_pool) as r:
                await r.ping()
                logger.info("Redis connection established")

        except Exception as e:
            logger.error("Failed to connect to Redis", exc_info=e)
            raise

    async def get_redis(self) -> redis.Redis:
        """Get Redis client instance."""
        if not self.redis_pool:
            await self.init_redis()
        return redis.Redis(connection_pool=self.redis_pool)

    async def set(self, key: str, value: Any, expire: Optional[int] = None) -> bool:
        """Set a key-value pair in Redis."""
        try:
            client = await self.get_redis()
            serialized_value = json.dumps(value) if not isinstance(value, str) else value

            if expire:
                return bool(await client.setex(key, expire, serialized_value))
            return bool(await client.set(key, serialized_value))

        except Exception as e:
            logger.error("Redis SET error", key=key, exc_info=e)
            return False

    async def get(self, key: str) -> Optional[Any]:
        """Get a value from Redis."""
        try:
            client = await self.get_redis()
            value = await client.get(key)

            if value is None:
                return None

            try:
                return json.loads(value)
            except json.JSONDecodeError:
                return value

        except Exception as e:
            logger.error("Redis GET error", key=key, exc_info=e)
            return None

    async def delete(self, *keys: str) -> int:
        """Delete keys from Redis, returning how many were removed."""
        if not keys:
            return 0
        try:
            client = await self.get_redis()
            return await client.delete(*keys)
        except Exception as e:
            logger.error("Redis DELETE error", keys=len(keys), exc_info=e)
            return 0

    async def scan_keys(self, pattern: str) -> List[str]:
        """List keys matching a glob pattern."""
        try:
            client = await self.get_redis()
            return [key async for key in client.scan_iter(match=pattern)]
        except Exception as e:
            logger.error("Redis SCAN error", pattern=pattern, exc_info=e)
            return []

    async def close(self) -> None:
        """Release the connection pool."""
        if self.redis_pool is not None:
            await self.redis_pool.disconnect()
            self.redis_pool = None


# Global Redis client instance
redis_client = RedisClient()
