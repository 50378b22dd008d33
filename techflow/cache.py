"""
Redis caching utilities for analytics rollups
Fail-open: when Redis is disabled or unreachable every call is a cache miss
"""

import json
import logging
import os
from typing import Any, Optional

import redis

from .config import CACHE_ENABLED

logger = logging.getLogger(__name__)

ANALYTICS_PREFIX = "analytics"

redis_client: Optional[redis.Redis] = None


def get_redis_client() -> Optional[redis.Redis]:
    """
    Get or create the Redis client.
    Supports REDIS_URL (managed Redis) or REDIS_HOST/REDIS_PORT.
    """
    global redis_client

    if not CACHE_ENABLED:
        return None

    if redis_client is None:
        redis_url = os.getenv("REDIS_URL")
        try:
            if redis_url:
                redis_client = redis.from_url(
                    redis_url,
                    decode_responses=True,
                    socket_connect_timeout=5,
                    socket_timeout=5,
                    retry_on_timeout=True,
                    health_check_interval=30,
                )
            else:
                redis_client = redis.Redis(
                    host=os.getenv("REDIS_HOST", "localhost"),
                    port=int(os.getenv("REDIS_PORT", "6379")),
                    password=os.getenv("REDIS_PASSWORD"),
                    decode_responses=True,
                    socket_connect_timeout=5,
                    socket_timeout=5,
                )
            redis_client.ping()
            logger.info("✅ Redis cache connected")
        except redis.RedisError as e:
            logger.warning(f"⚠️ Redis cache unavailable, continuing without cache: {e}")
            redis_client = None

    return redis_client


class Cache:
    """Redis cache wrapper with automatic JSON serialization"""

    def __init__(self):
        self.redis_client = None

    def _get_client(self):
        """Lazy load Redis client"""
        if self.redis_client is None:
            self.redis_client = get_redis_client()
        return self.redis_client

    def get(self, key: str) -> Optional[Any]:
        client = self._get_client()
        if not client:
            return None

        try:
            value = client.get(key)
            if value:
                logger.debug(f"✅ Cache HIT: {key}")
                return json.loads(value)
            logger.debug(f"❌ Cache MISS: {key}")
            return None
        except (redis.RedisError, ValueError) as e:
            logger.error(f"❌ Cache get error for {key}: {e}")
            return None

    def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        """Set value in cache with TTL (default 5 minutes)"""
        client = self._get_client()
        if not client:
            return False

        try:
            client.setex(key, ttl, json.dumps(value, default=str))
            logger.debug(f"✅ Cache SET: {key} (TTL: {ttl}s)")
            return True
        except (redis.RedisError, TypeError) as e:
            logger.error(f"❌ Cache set error for {key}: {e}")
            return False

    def delete_pattern(self, pattern: str) -> int:
        """Delete all keys matching pattern (e.g., 'analytics:*')"""
        client = self._get_client()
        if not client:
            return 0

        try:
            keys = list(client.scan_iter(match=pattern))
            if keys:
                deleted = client.delete(*keys)
                logger.debug(f"✅ Cache DELETE pattern: {pattern} ({deleted} keys)")
                return deleted
            return 0
        except redis.RedisError as e:
            logger.error(f"❌ Cache delete pattern error for {pattern}: {e}")
            return 0


# Global cache instance
cache = Cache()


def get_analytics_cached(key: str) -> Optional[dict]:
    return cache.get(f"{ANALYTICS_PREFIX}:{key}")


def set_analytics_cached(key: str, data: dict, ttl: int) -> bool:
    return cache.set(f"{ANALYTICS_PREFIX}:{key}", data, ttl)


def invalidate_analytics_cache() -> int:
    """Drop cached rollups after service orders or invoices change"""
    return cache.delete_pattern(f"{ANALYTICS_PREFIX}:*")
