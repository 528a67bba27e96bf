"""
Pydantic models for persisted data.

Modules
-------
cache : RankedEntry, CachedRanking — the cached form of a ranking.
"""
