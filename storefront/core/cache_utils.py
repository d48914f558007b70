"""
Caching utilities for backend API reads.
Uses Redis for caching when configured (see REDIS_URL).
"""
from django.core.cache import cache
from functools import wraps
import hashlib
import logging

logger = logging.getLogger(__name__)

# Cache TTLs (in seconds)
CATEGORY_TREE_CACHE_TTL = 3600  # 1 hour
SYSTEM_CONFIG_CACHE_TTL = 3600  # 1 hour (config rarely changes)
CONTENT_CACHE_TTL = 600  # 10 minutes
CURRENT_USER_CACHE_TTL = 300  # 5 minutes
STATS_CACHE_TTL = 1800  # 30 minutes
LOW_STOCK_CACHE_TTL = 300  # 5 minutes

# Fixed keys (deleted directly on invalidation)
CATEGORY_TREE_KEY = 'category_tree'
SYSTEM_CONFIG_KEY = 'system_config'
CONTENT_KEY_PREFIX = 'content:'
CURRENT_USER_KEY_PREFIX = 'current_user:'
STATS_KEY_PREFIX = 'admin_stats'


def make_cache_key(prefix, *args, **kwargs):
    """Generate a unique cache key from arguments"""
    # Convert args and kwargs to a stable string representation
    key_data = f"{prefix}:{args}:{sorted(kwargs.items())}"
    # Hash it to keep key length reasonable
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{prefix}:{key_hash}"


def token_digest(token):
    """Stable, non-reversible cache key fragment for a bearer token"""
    return hashlib.sha256(token.encode()).hexdigest()


def get_content_cache_key(key):
    return f"{CONTENT_KEY_PREFIX}{key}"


def get_current_user_cache_key(token):
    return f"{CURRENT_USER_KEY_PREFIX}{token_digest(token)}"


def cached_query(cache_ttl=60, key_prefix="query"):
    """
    Decorator to cache expensive backend reads

    Usage:
        @cached_query(cache_ttl=1800, key_prefix="admin_stats")
        def fetch_kpis(client, start, end):
            return client.get(...)

    The first positional argument is treated as the client and left out of
    the key, so different visitors share the same cached result.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(client, *args, **kwargs):
            # Generate cache key
            cache_key = make_cache_key(f"{key_prefix}:{func.__name__}", *args, **kwargs)

            # Try to get from cache
            cached_data = cache.get(cache_key)
            if cached_data is not None:
                logger.debug(f"Cache HIT for {key_prefix}: {cache_key}")
                return cached_data

            # Cache miss - execute function
            logger.debug(f"Cache MISS for {key_prefix}: {cache_key}")
            result = func(client, *args, **kwargs)

            # Store in cache
            if result is not None:
                cache.set(cache_key, result, cache_ttl)

            return result
        return wrapper
    return decorator


def get_or_fetch(cache_key, ttl, fetch):
    """Return the cached value for cache_key, calling fetch() on a miss"""
    cached_data = cache.get(cache_key)
    if cached_data is not None:
        logger.debug(f"Cache HIT: {cache_key}")
        return cached_data

    logger.debug(f"Cache MISS: {cache_key}")
    data = fetch()
    if data is not None:
        cache.set(cache_key, data, ttl)
    return data


def invalidate_cache_pattern(pattern):
    """
    Invalidate all cache keys matching a pattern
    Note: This requires Redis with SCAN command support; other backends
    rely on the TTL
    """
    try:
        from django_redis import get_redis_connection
        redis_conn = get_redis_connection("default")

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


def invalidate_category_cache():
    cache.delete(CATEGORY_TREE_KEY)
    logger.info("Invalidated category tree cache")


def invalidate_system_config_cache():
    cache.delete(SYSTEM_CONFIG_KEY)
    logger.info("Invalidated system config cache")


def invalidate_content_cache(key):
    cache.delete(get_content_cache_key(key))
    logger.info(f"Invalidated content cache: {key}")


def invalidate_stats_cache():
    invalidate_cache_pattern(STATS_KEY_PREFIX)
    logger.info("Invalidated analytics cache")
