"""
Stores for precomputed rankings.

Modules
-------
base         : CacheStore protocol, InMemoryCacheStore.
sqlite_store : SqliteCacheStore — one JSON row per subject.
factory      : build_cache_store() — backend named in ``[cache]``.
"""
