"""
Caching utilities for public catalog listings and dashboard statistics
Uses Redis (django-redis) in production, the local-memory cache otherwise
"""
from django.core.cache import cache
import hashlib
import logging

logger = logging.getLogger(__name__)

# Cache TTLs (in seconds)
PRODUCTS_LIST_CACHE_TTL = 120  # 2 minutes
CATEGORIES_CACHE_TTL = 600  # 10 minutes
DASHBOARD_STATS_CACHE_TTL = 60  # 1 minute

PRODUCTS_LIST_PREFIX = 'products_list'
CATEGORIES_PREFIX = 'categories_list'
DASHBOARD_STATS_PREFIX = 'dashboard_stats'


def make_cache_key(prefix, *args, **kwargs):
    """Generate a unique cache key from arguments"""
    key_data = f"{prefix}:{args}:{sorted(kwargs.items())}"
    # Hash it to keep key length reasonable
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{prefix}:{key_hash}"


def get_cached(prefix, *args, **kwargs):
    """
    Look up a cached payload
    Returns tuple: (cached_data, cache_key)
    """
    cache_key = make_cache_key(prefix, *args, **kwargs)
    cached_data = cache.get(cache_key)
    if cached_data is not None:
        logger.debug(f"Cache HIT for {prefix}: {cache_key}")
    else:
        logger.debug(f"Cache MISS for {prefix}: {cache_key}")
    return cached_data, cache_key


def set_cached(cache_key, data, ttl):
    cache.set(cache_key, data, ttl)


def invalidate_cache_pattern(pattern):
    """
    Invalidate all cache keys matching a pattern
    Uses Redis SCAN when the default cache is django-redis; other backends
    cannot enumerate keys, so the whole cache is cleared instead.
    """
    try:
        from django_redis import get_redis_connection
        redis_conn = get_redis_connection("default")
    except NotImplementedError:
        cache.clear()
        logger.debug(f"Cache backend has no key scan; cleared cache for pattern: {pattern}")
        return

    try:
        keys = []
        cursor = 0
        while True:
            cursor, partial_keys = redis_conn.scan(cursor, match=f"*{pattern}*", count=100)
            keys.extend(partial_keys)
            if cursor == 0:
                break

        if keys:
            redis_conn.delete(*keys)
            logger.info(f"Invalidated {len(keys)} cache keys matching pattern: {pattern}")
    except Exception as e:
        logger.warning(f"Could not invalidate cache pattern {pattern}: {str(e)}")


def invalidate_catalog_cache():
    """Invalidate products and categories listings"""
    invalidate_cache_pattern(PRODUCTS_LIST_PREFIX)
    invalidate_cache_pattern(CATEGORIES_PREFIX)
    logger.info("Invalidated catalog cache")


def invalidate_dashboard_cache():
    """Invalidate dashboard statistics"""
    invalidate_cache_pattern(DASHBOARD_STATS_PREFIX)
