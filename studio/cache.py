"""
Caching utilities for timeline reads (templates, session context)

The process cache is built once by get_cache() and handed to the timeline
components as a constructor argument; they never look it up themselves.
"""

import fnmatch
import json
import logging
import time
from threading import Lock
from typing import Any, Callable, Optional

import redis

from . import config

logger = logging.getLogger(__name__)


class Cache:
    """Cache interface with JSON serialization, TTL and key invalidation"""

    def get(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    def set(self, key: str, value: Any, ttl: int = 3600) -> bool:
        raise NotImplementedError

    def delete(self, key: str) -> bool:
        raise NotImplementedError

    def delete_pattern(self, pattern: str) -> int:
        raise NotImplementedError


def create_redis_client() -> redis.Redis:
    """
    Create a Redis client from configuration
    Supports both standard Redis and managed Redis URLs
    """
    if config.REDIS_URL:
        # Mask password in URL for logging
        if "@" in config.REDIS_URL:
            url_parts = config.REDIS_URL.split("@")
            protocol = url_parts[0].split(":")[0]
            masked_url = f"{protocol}:****@{url_parts[1]}"
        else:
            masked_url = "****"
        logger.info(f"📡 Using Redis URL connection: {masked_url}")

        client = redis.from_url(
            config.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=15,
            socket_timeout=30,
            retry_on_timeout=True,
            health_check_interval=30,
            max_connections=20,
        )
    else:
        logger.info(
            f"📡 Using Redis at {config.REDIS_HOST}:{config.REDIS_PORT} "
            f"(db={config.REDIS_DB}, ssl={'on' if config.REDIS_SSL else 'off'})"
        )
        client = redis.Redis(
            host=config.REDIS_HOST,
            port=config.REDIS_PORT,
            password=config.REDIS_PASSWORD,
            db=config.REDIS_DB,
            ssl=config.REDIS_SSL,
            decode_responses=True,
            socket_connect_timeout=15,
            socket_timeout=30,
            retry_on_timeout=True,
            health_check_interval=30,
            max_connections=20,
        )

    client.ping()
    logger.info("Redis connected successfully")
    return client


class RedisCache(Cache):
    """Redis cache wrapper with automatic serialization"""

    def __init__(self, client: Optional[redis.Redis] = None):
        self.redis_client = client

    def _get_client(self):
        """Lazy load Redis client"""
        if self.redis_client is None:
            try:
                self.redis_client = create_redis_client()
            except Exception as e:
                logger.warning(f"⚠️ Redis cache unavailable: {e}")
                return None
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
        except Exception as e:
            logger.error(f"❌ Cache get error for {key}: {e}")
            return None

    def set(self, key: str, value: Any, ttl: int = 3600) -> bool:
        client = self._get_client()
        if not client:
            return False

        try:
            client.setex(key, ttl, json.dumps(value))
            logger.debug(f"✅ Cache SET: {key} (TTL: {ttl}s)")
            return True
        except Exception as e:
            logger.error(f"❌ Cache set error for {key}: {e}")
            return False

    def delete(self, key: str) -> bool:
        client = self._get_client()
        if not client:
            return False

        try:
            client.delete(key)
            logger.debug(f"✅ Cache DELETE: {key}")
            return True
        except Exception as e:
            logger.error(f"❌ Cache delete error for {key}: {e}")
            return False

    def delete_pattern(self, pattern: str) -> int:
        """Delete all keys matching pattern (e.g., 'timeline_context:abc:*')"""
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
        except Exception as e:
            logger.error(f"❌ Cache delete pattern error for {pattern}: {e}")
            return 0

    def stats(self) -> dict:
        client = self._get_client()
        if not client:
            return {"available": False}

        try:
            info = client.info()
            hits = info.get("keyspace_hits", 0)
            misses = info.get("keyspace_misses", 0)
            return {
                "available": True,
                "used_memory": info.get("used_memory_human"),
                "connected_clients": info.get("connected_clients"),
                "keyspace_hits": hits,
                "keyspace_misses": misses,
                "hit_rate": hits / max(hits + misses, 1) * 100,
            }
        except Exception as e:
            logger.error(f"❌ Failed to get cache stats: {e}")
            return {"available": False, "error": str(e)}


class MemoryCache(Cache):
    """In-process cache for development and tests.

    Values are stored serialized so callers never share mutable objects
    with the cache, matching what they get back from Redis.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic, max_size: int = 1000):
        self._clock = clock
        self._max_size = max_size
        self._entries: dict[str, tuple[float, str]] = {}
        self._lock = Lock()

    def _evict_expired(self, now: float) -> None:
        expired = [k for k, (expires_at, _) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                logger.debug(f"❌ Cache MISS: {key}")
                return None
            expires_at, payload = entry
            if expires_at <= self._clock():
                del self._entries[key]
                logger.debug(f"⌛ Cache EXPIRED: {key}")
                return None
        logger.debug(f"✅ Cache HIT: {key}")
        return json.loads(payload)

    def set(self, key: str, value: Any, ttl: int = 3600) -> bool:
        payload = json.dumps(value)
        with self._lock:
            now = self._clock()
            if len(self._entries) >= self._max_size and key not in self._entries:
                self._evict_expired(now)
                if len(self._entries) >= self._max_size:
                    # Drop the entry closest to expiry
                    oldest = min(self._entries, key=lambda k: self._entries[k][0])
                    del self._entries[oldest]
            self._entries[key] = (now + ttl, payload)
        logger.debug(f"✅ Cache SET: {key} (TTL: {ttl}s)")
        return True

    def delete(self, key: str) -> bool:
        with self._lock:
            self._entries.pop(key, None)
        return True

    def delete_pattern(self, pattern: str) -> int:
        with self._lock:
            keys = [k for k in self._entries if fnmatch.fnmatchcase(k, pattern)]
            for key in keys:
                del self._entries[key]
        if keys:
            logger.debug(f"✅ Cache DELETE pattern: {pattern} ({len(keys)} keys)")
        return len(keys)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


def build_cache(backend: Optional[str] = None) -> Cache:
    """Build the cache configured for this process"""
    backend = (backend or config.CACHE_BACKEND).lower()
    if backend == "redis":
        logger.info("🗄️ Using Redis cache backend")
        return RedisCache()
    if backend == "memory":
        logger.info("🗄️ Using in-memory cache backend")
        logger.warning(
            "⚠️ In-memory cache is per process: template and context changes made by one "
            "worker stay invisible to the others until their TTL expires. Set CACHE_BACKEND=redis "
            "when running more than one worker."
        )
        return MemoryCache()
    raise ValueError(f"Unknown cache backend: {backend}")


# Cache key builders

def build_template_key(session_type: str) -> str:
    return f"timeline_template:{session_type}"


def build_context_key(session_id: str, day: str) -> str:
    return f"timeline_context:{session_id}:{day}"


def invalidate_template_cache(cache: Cache, session_type: str) -> bool:
    """Invalidate a cached template when it is replaced or deleted"""
    return cache.delete(build_template_key(session_type))


def invalidate_session_context(cache: Cache, session_id: str) -> int:
    """Invalidate every cached context for a session after its timeline changes"""
    return cache.delete_pattern(f"timeline_context:{session_id}:*")


_process_cache: Optional[Cache] = None


def get_cache() -> Cache:
    """FastAPI dependency returning the cache built for this process"""
    global _process_cache
    if _process_cache is None:
        _process_cache = build_cache()
    return _process_cache
