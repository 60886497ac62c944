"""Cache memoire des reponses HTTP."""

from vidcat.adapters.cache.response_cache import CacheEntry, ResponseCache

__all__ = ["CacheEntry", "ResponseCache"]
