"""Redis client for the Open-Graph metadata cache."""

import hashlib
import json
from typing import Any

import redis.asyncio as redis
import structlog

from gitolink.core.config import get_settings

settings = get_settings()
logger = structlog.get_logger()

# Global Redis client instance
_redis_client: redis.Redis | None = None

# Cache key prefixes
OG_CACHE_PREFIX = "og:"


async def get_redis() -> redis.Redis:
    """Get the Redis client instance, creating it if necessary."""
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
        logger.info("Redis client initialized", url=settings.redis_url)
    return _redis_client


async def close_redis() -> None:
    """Close the Redis connection."""
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None
        logger.info("Redis connection closed")


def _og_cache_key(url: str) -> str:
    """Generate cache key for a page URL (hashed to bound key length)."""
    digest = hashlib.sha256(url.encode("utf-8")).hexdigest()
    return f"{OG_CACHE_PREFIX}{digest}"


async def get_cached_og_metadata(url: str) -> dict[str, Any] | None:
    """Get cached Open-Graph metadata for a URL.

    Returns None on a miss or when Redis is unreachable.
    """
    client = await get_redis()
    try:
        data = await client.get(_og_cache_key(url))
    except redis.RedisError as e:
        logger.warning("Redis get error", url=url, error=str(e))
        return None

    if data:
        logger.debug("OG cache hit", url=url)
        return json.loads(data)
    logger.debug("OG cache miss", url=url)
    return None


async def cache_og_metadata(
    url: str,
    metadata: dict[str, Any],
    ttl: int | None = None,
) -> None:
    """Cache Open-Graph metadata for a URL.

    Args:
        url: The page URL the metadata was scraped from
        metadata: Dictionary with title, description and image
        ttl: Time to live in seconds (defaults to og_cache_ttl_seconds)
    """
    ttl = ttl or settings.og_cache_ttl_seconds
    client = await get_redis()
    try:
        await client.setex(_og_cache_key(url), ttl, json.dumps(metadata))
        logger.debug("OG metadata cached", url=url, ttl=ttl)
    except redis.RedisError as e:
        logger.warning("Redis set error", url=url, error=str(e))
