"""
Cache store contract and the in-process reference store.

The precompute module is the only writer; request threads only read.  Stores
hand out copies, so a reader can never observe (or cause) a mutation of the
cached ranking.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Optional, Protocol, Sequence, runtime_checkable

from reco_engine.result.recommendation import Recommendation

logger = logging.getLogger(__name__)


@runtime_checkable
class CacheStore(Protocol):
    """Per-subject store of ranked recommendation lists."""

    def put(self, subject: Any, ranked: Sequence[Recommendation]) -> None:
        ...

    def get(self, subject: Any) -> Optional[list[Recommendation]]:
        """Cached ranking for ``subject``, best first, or ``None`` on a miss."""
        ...


def copy_ranking(ranked: Sequence[Recommendation]) -> list[Recommendation]:
    return [Recommendation(r.item, r.score.copy()) for r in ranked]


class InMemoryCacheStore:
    """Lock-protected dict of subject -> ranked list."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._rankings: dict[Any, list[Recommendation]] = {}

    def put(self, subject: Any, ranked: Sequence[Recommendation]) -> None:
        snapshot = copy_ranking(ranked)
        with self._lock:
            self._rankings[subject] = snapshot
        logger.debug("Cached %d recommendation(s) for %s", len(snapshot), subject)

    def get(self, subject: Any) -> Optional[list[Recommendation]]:
        with self._lock:
            cached = self._rankings.get(subject)
        return None if cached is None else copy_ranking(cached)

    def clear(self) -> None:
        with self._lock:
            self._rankings.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._rankings)

    def __contains__(self, subject: Any) -> bool:
        with self._lock:
            return subject in self._rankings
