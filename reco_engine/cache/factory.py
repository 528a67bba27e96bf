"""
Cache store selection from configuration.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from reco_engine.cache.base import CacheStore, InMemoryCacheStore
from reco_engine.cache.sqlite_store import ItemResolver, SqliteCacheStore

if TYPE_CHECKING:
    from reco_engine.config import AppConfig

logger = logging.getLogger(__name__)


def build_cache_store(config: "AppConfig", resolver: Optional[ItemResolver] = None) -> CacheStore:
    """Return the store named by ``config.cache.backend``."""
    cache_cfg = config.cache
    if cache_cfg.backend == "memory":
        logger.debug("Using in-memory cache store.")
        return InMemoryCacheStore()

    logger.debug("Using sqlite cache store at %s", cache_cfg.db_path)
    return SqliteCacheStore(
        cache_cfg.db_path,
        resolver=resolver,
        wal_mode=cache_cfg.wal_mode,
        busy_timeout_ms=cache_cfg.busy_timeout_ms,
        max_recommendations=config.precompute.max_recommendations,
    )
