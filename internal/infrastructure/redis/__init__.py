"""
Redis infrastructure package.
"""
from .cache import CachedAttributeCatalog, RedisCache

__all__ = ["CachedAttributeCatalog", "RedisCache"]
