"""Cache layer for murmur.

Provides Redis caching with the cache-aside pattern:
- RedisCache: fallible-I/O gateway that degrades to a miss on backend failure
- ReadThroughCache: populate-on-miss reads with miss coalescing
- CacheInvalidationPolicy: per-entity and prefix purges after writes
- TTL-based expiration bounds staleness when an invalidation fails
"""

from murmur.cache.invalidation import CacheInvalidationPolicy
from murmur.cache.keys import CacheKeys
from murmur.cache.read_through import ReadThroughCache
from murmur.cache.redis import RedisCache, create_redis

__all__ = [
    "CacheKeys",
    "RedisCache",
    "create_redis",
    "ReadThroughCache",
    "CacheInvalidationPolicy",
]
