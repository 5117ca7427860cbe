import redis.asyncio as redis
import json
import logging
from typing import Optional, Any
from datetime import datetime, date

from app.config import settings

logger = logging.getLogger(__name__)


class CacheService:
    """Redis cache for read-heavy lists; every operation is a no-op while disconnected"""

    def __init__(self, url: str = None, ttl: int = None):
        self.url = url or settings.redis_url
        self.ttl = ttl or settings.cache_ttl
        self.redis_client: Optional[redis.Redis] = None

    @property
    def connected(self) -> bool:
        return self.redis_client is not None

    async def connect(self, url: str = None, enabled: bool = None, ttl: int = None):
        """Connect to Redis; arguments override the values the service was built with"""
        if url:
            self.url = url
        if ttl:
            self.ttl = ttl
        if enabled is None:
            enabled = settings.enable_cache
        if not enabled:
            logger.info("Cache disabled by configuration")
            return

        try:
            self.redis_client = redis.from_url(
                self.url,
                encoding="utf-8",
                decode_responses=True
            )
            await self.redis_client.ping()
            logger.info("Connected to Redis successfully")
        except Exception as e:
            logger.warning(f"Failed to connect to Redis: {e}. Caching will be disabled.")
            self.redis_client = None

    async def disconnect(self):
        if self.redis_client:
            await self.redis_client.aclose()
            self.redis_client = None

    async def get(self, key: str) -> Optional[Any]:
        if not self.redis_client:
            return None

        try:
            value = await self.redis_client.get(key)
            if value:
                return json.loads(value)
        except Exception as e:
            logger.error(f"Cache get error for {key}: {e}")
        return None

    async def set(self, key: str, value: Any, ttl: Optional[int] = None):
        if not self.redis_client:
            return

        try:
            serialized = json.dumps(value, default=self._json_serializer)
            await self.redis_client.setex(key, ttl or self.ttl, serialized)
        except Exception as e:
            logger.error(f"Cache set error for {key}: {e}")

    async def incr(self, key: str) -> Optional[int]:
        """Atomically bump a counter; None while disconnected"""
        if not self.redis_client:
            return None

        try:
            return await self.redis_client.incr(key)
        except Exception as e:
            logger.error(f"Cache incr error for {key}: {e}")
            return None

    @staticmethod
    def _json_serializer(obj: Any) -> Any:
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        raise TypeError(f"Type {type(obj)} not serializable")

    async def delete_pattern(self, pattern: str):
        """Delete all keys matching a glob pattern"""
        if not self.redis_client:
            return

        try:
            async for key in self.redis_client.scan_iter(match=pattern):
                await self.redis_client.delete(key)
        except Exception as e:
            logger.error(f"Cache delete pattern error for {pattern}: {e}")


# Singleton instance
cache_service = CacheService()
