"""
Redis cache utility for export payloads
"""
import redis
import json
import logging
from typing import Optional, Any
from interchange.config import settings

logger = logging.getLogger(__name__)


class CacheService:
    """Redis-based cache of serialized export payloads, keyed by entity kind"""

    KEY_PREFIX = "export"

    def __init__(self, url: Optional[str] = None, enabled: bool = True):
        self.redis_client = None
        if not enabled:
            logger.info("Export cache disabled by configuration")
            return

        try:
            self.redis_client = redis.from_url(
                url or settings.REDIS_URL,
                decode_responses=True,
                socket_connect_timeout=5
            )
            # Test connection
            self.redis_client.ping()
            logger.info("Redis connection established")
        except Exception as e:
            logger.warning(f"Redis connection failed: {str(e)}. Caching disabled.")
            self.redis_client = None

    def key(self, kind: str) -> str:
        return f"{self.KEY_PREFIX}:{kind}"

    def get(self, kind: str) -> Optional[Any]:
        """
        Get a cached export payload

        Returns:
            Cached value or None
        """
        if not self.redis_client:
            return None

        key = self.key(kind)
        try:
            value = self.redis_client.get(key)
            if value:
                logger.info(f"Cache hit: {key}")
                return json.loads(value)
            logger.info(f"Cache miss: {key}")
            return None
        except Exception as e:
            logger.error(f"Cache get error: {str(e)}")
            return None

    def set(self, kind: str, value: Any, ttl: int = None) -> bool:
        """
        Cache an export payload

        Args:
            kind: Entity kind
            value: Value to cache (must be JSON serializable)
            ttl: Time to live in seconds (default from settings)
        """
        if not self.redis_client:
            return False

        key = self.key(kind)
        try:
            ttl = ttl or settings.EXPORT_CACHE_TTL
            self.redis_client.setex(key, ttl, json.dumps(value))
            logger.info(f"Cache set: {key} (TTL: {ttl}s)")
            return True
        except Exception as e:
            logger.error(f"Cache set error: {str(e)}")
            return False

    def invalidate(self, kind: str) -> bool:
        """Drop the cached export of one kind after it was imported"""
        if not self.redis_client:
            return False

        key = self.key(kind)
        try:
            self.redis_client.delete(key)
            logger.info(f"Cache delete: {key}")
            return True
        except Exception as e:
            logger.error(f"Cache delete error: {str(e)}")
            return False

    def clear(self) -> bool:
        """Drop every cached export (after the database file was replaced)"""
        if not self.redis_client:
            return False

        try:
            keys = self.redis_client.keys(f"{self.KEY_PREFIX}:*")
            if keys:
                self.redis_client.delete(*keys)
                logger.info(f"Cleared {len(keys)} export cache entries")
            return True
        except Exception as e:
            logger.error(f"Cache clear error: {str(e)}")
            return False


# Global instance
cache_service = CacheService(enabled=settings.CACHE_ENABLED)
