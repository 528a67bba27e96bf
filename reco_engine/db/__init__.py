"""
SQLite persistence for precomputed recommendations.

Modules
-------
connection   : get_connection() context manager.
schema       : apply_schema() and the cached_recommendations DDL.
repositories : BaseRepository and CachedRecommendationRepository.
"""
