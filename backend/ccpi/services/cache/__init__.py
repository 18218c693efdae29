"""
Cache module for the CCPI engine.

Holds the latest composite result in process memory.
"""

from ccpi.services.cache.result_cache import CacheEntry, ResultCache

__all__ = [
    "CacheEntry",
    "ResultCache",
]
