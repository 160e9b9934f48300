"""
Caching utilities for settings lookups and dashboard aggregates
Uses Redis (django-redis) in deployed environments
"""
from django.core.cache import cache
from functools import wraps
import hashlib
import logging

logger = logging.getLogger(__name__)

# Cache TTLs (in seconds)
SHOP_SETTINGS_CACHE_TTL = 600  # 10 minutes
DASHBOARD_STATS_CACHE_TTL = 300  # 5 minutes

SHOP_SETTINGS_CACHE_KEY = 'shop_settings'
DASHBOARD_STATS_PREFIX = 'dashboard_stats'


def make_cache_key(prefix, *args, **kwargs):
    """Generate a unique cache key from arguments"""
    key_data = f"{prefix}:{args}:{sorted(kwargs.items())}"
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{prefix}:{key_hash}"


def cached_query(cache_ttl=60, key_prefix="query"):
    """
    Decorator to cache expensive queries

    Usage:
        @cached_query(cache_ttl=300, key_prefix="dashboard_stats")
        def build_stats(today):
            return data
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            cache_key = make_cache_key(key_prefix, *args, **kwargs)

            cached_data = cache.get(cache_key)
            if cached_data is not None:
                logger.debug(f"Cache HIT for {key_prefix}: {cache_key}")
                return cached_data

            logger.debug(f"Cache MISS for {key_prefix}: {cache_key}")
            result = func(*args, **kwargs)
            cache.set(cache_key, result, cache_ttl)
            _remember_key(key_prefix, cache_key, cache_ttl)
            return result
        return wrapper
    return decorator


def _remember_key(prefix, cache_key, ttl):
    """Track keys per prefix so non-Redis backends can invalidate them too"""
    registry_key = f"{prefix}:keys"
    keys = cache.get(registry_key) or []
    if cache_key not in keys:
        keys.append(cache_key)
        cache.set(registry_key, keys, ttl)


def invalidate_cache_pattern(pattern):
    """
    Invalidate all cache keys matching a pattern
    Uses Redis SCAN when the default cache is django-redis, the key registry otherwise
    """
    registry_key = f"{pattern}:keys"
    tracked = cache.get(registry_key) or []
    if tracked:
        cache.delete_many(tracked + [registry_key])

    try:
        from django_redis import get_redis_connection
        redis_conn = get_redis_connection("default")
    except NotImplementedError:
        # Default cache is not Redis; the key registry above covered it
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


def get_cached_shop_settings():
    """Return the ShopSettings singleton, reading through the cache"""
    from .models import ShopSettings

    settings_obj = cache.get(SHOP_SETTINGS_CACHE_KEY)
    if settings_obj is None:
        settings_obj = ShopSettings.load()
        cache.set(SHOP_SETTINGS_CACHE_KEY, settings_obj, SHOP_SETTINGS_CACHE_TTL)
    return settings_obj


def invalidate_shop_settings_cache():
    cache.delete(SHOP_SETTINGS_CACHE_KEY)
    logger.info("Invalidated shop settings cache")


def invalidate_dashboard_cache():
    """Invalidate dashboard stats cache"""
    invalidate_cache_pattern(DASHBOARD_STATS_PREFIX)
    logger.info("Invalidated dashboard cache")
