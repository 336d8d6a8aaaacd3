"""Cache providers.

MemoryCacheProvider is a dict-based TTL cache.  For multi-worker
deployments, swap in a Redis adapter implementing ICacheProvider.
"""

from tourstack.providers.cache.memory_cache import MemoryCacheProvider

__all__ = ["MemoryCacheProvider"]
