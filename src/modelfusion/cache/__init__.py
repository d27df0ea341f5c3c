"""
Cache module - caching of model call results.
"""

from modelfusion.cache.backends import Cache, CacheEntry, FileCache, MemoryCache
from modelfusion.cache.key import canonical_key, create_call_cache_key, hash_key

__all__ = [
    "Cache",
    "CacheEntry",
    "FileCache",
    "MemoryCache",
    "canonical_key",
    "create_call_cache_key",
    "hash_key",
]
