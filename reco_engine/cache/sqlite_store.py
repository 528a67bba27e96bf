"""
SQLite-backed cache store.

One row per subject in ``cached_recommendations`` (see ``db/schema.py``).
Subjects and items are stored by ``str()``; on read, item keys are turned
back into domain objects by an optional ``resolver`` (e.g. the people graph's
``get``).  Entries whose key no longer resolves are dropped with a warning.

Every call opens its own short-lived connection, so the store is safe to use
from the precompute thread and request threads at the same time.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Sequence

from reco_engine.db.connection import get_connection
from reco_engine.db.repositories.cache_repo import CachedRecommendationRepository
from reco_engine.db.schema import apply_schema
from reco_engine.models.cache import CachedRanking, RankedEntry
from reco_engine.result.recommendation import Recommendation
from reco_engine.utils.time_utils import utcnow

logger = logging.getLogger(__name__)

ItemResolver = Callable[[str], Any]


class SqliteCacheStore:
    """Persistent ``CacheStore``.

    Args:
        db_path:         SQLite file path.
        resolver:        Maps a stored item key back to the item; identity if ``None``.
        wal_mode:        Enable WAL journal mode.
        busy_timeout_ms: Lock wait before ``OperationalError``.
        max_recommendations: Recorded alongside each row for inspection.

    Raises:
        ValueError: If ``db_path`` is ``":memory:"``.  Each call opens its own
                    connection, so an in-memory database would be empty on
                    every call; use ``InMemoryCacheStore`` instead.
    """

    def __init__(
        self,
        db_path: str,
        resolver: Optional[ItemResolver] = None,
        wal_mode: bool = True,
        busy_timeout_ms: int = 5000,
        max_recommendations: Optional[int] = None,
    ) -> None:
        if db_path == ":memory:":
            raise ValueError(
                "SqliteCacheStore needs a file path; use InMemoryCacheStore for ':memory:'."
            )
        self.db_path = db_path
        self.resolver = resolver
        self.wal_mode = wal_mode
        self.busy_timeout_ms = busy_timeout_ms
        self.max_recommendations = max_recommendations

        with self._connect() as conn:
            apply_schema(conn)

    def _connect(self):
        return get_connection(
            self.db_path, wal_mode=self.wal_mode, busy_timeout_ms=self.busy_timeout_ms
        )

    def put(self, subject: Any, ranked: Sequence[Recommendation]) -> None:
        ranking = CachedRanking(
            subject_key=str(subject),
            computed_at=utcnow(),
            entries=[RankedEntry.from_recommendation(r) for r in ranked],
        )
        with self._connect() as conn:
            CachedRecommendationRepository(conn).upsert(ranking, self.max_recommendations)
        logger.debug("Persisted %d recommendation(s) for %s", len(ranking.entries), subject)

    def get(self, subject: Any) -> Optional[list[Recommendation]]:
        with self._connect() as conn:
            ranking = CachedRecommendationRepository(conn).get(str(subject))
        if ranking is None:
            return None

        ranked: list[Recommendation] = []
        for entry in ranking.entries:
            try:
                item = self._resolve(entry.item_key)
            except KeyError:
                logger.warning(
                    "Dropping cached item '%s' for %s: no longer resolvable.",
                    entry.item_key, subject,
                )
                continue
            ranked.append(Recommendation(item, entry.to_score()))
        return ranked

    def subject_keys(self) -> list[str]:
        """Keys of every cached subject, sorted."""
        with self._connect() as conn:
            return CachedRecommendationRepository(conn).list_subject_keys()

    def evict(self, subject: Any) -> bool:
        """Drop the cached ranking for ``subject``; ``False`` if there was none."""
        with self._connect() as conn:
            removed = CachedRecommendationRepository(conn).delete(str(subject))
        if removed:
            logger.info("Evicted cached recommendations for %s", subject)
        return removed

    def _resolve(self, key: str) -> Any:
        return key if self.resolver is None else self.resolver(key)

    def __len__(self) -> int:
        with self._connect() as conn:
            return CachedRecommendationRepository(conn).count()
