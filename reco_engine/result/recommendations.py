"""
Thread-safe aggregator of ``Recommendation`` objects for one scoring pass.

``Recommendations`` is the single merge point for every scoring unit that
runs during a pass.  Units may run in parallel threads and may touch the same
candidate; all contributions are summed, none is lost.

Locking
-------
Items are hashed onto a fixed number of lock stripes.  Each stripe owns its
own lock and dict, so contributions for candidates on different stripes never
contend.  Every lock is held only for the duration of a single dict lookup or
score mutation; there is no pass-wide lock.

Ranking
-------
``get(limit=N)`` returns the top ``N`` recommendations by descending total
score.  Equal totals are ordered by ascending ``str(item)`` and then
``repr(item)`` (or by a caller-supplied ``tie_breaker`` key).  The order is
therefore a function of the completed contents only, never of the order in
which concurrent units happened to finish.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Optional

from reco_engine.result.recommendation import Recommendation
from reco_engine.result.score import Score

DEFAULT_LOCK_STRIPES = 16

_MISSING = object()


def default_tie_breaker(item: Any) -> tuple[str, str]:
    """Secondary sort key for equal totals: ``(str(item), repr(item))``."""
    return (str(item), repr(item))


class _Stripe:
    __slots__ = ("lock", "items")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.items: dict[Any, Recommendation] = {}


class Recommendations:
    """Concurrent mapping of recommended item -> ``Recommendation``.

    ``get`` takes the item positionally and the ranking size as the
    keyword-only ``limit``: ``get(2)`` is a lookup of item ``2``, while
    ``get(limit=2)`` ranks the top two.

    Args:
        lock_stripes: Number of independent lock stripes (>= 1).
        tie_breaker:  Key function ordering items whose totals are equal.
    """

    def __init__(
        self,
        lock_stripes: int = DEFAULT_LOCK_STRIPES,
        tie_breaker: Optional[Callable[[Any], Any]] = None,
    ) -> None:
        if lock_stripes < 1:
            raise ValueError(f"lock_stripes must be >= 1, got {lock_stripes}.")
        self._stripes = [_Stripe() for _ in range(lock_stripes)]
        self._tie_breaker = tie_breaker or default_tie_breaker

    # ── Internal helpers ──────────────────────────────────────────────────────

    def _stripe(self, item: Any) -> _Stripe:
        return self._stripes[hash(item) % len(self._stripes)]

    @staticmethod
    def _check_item(item: Any) -> None:
        if item is None:
            raise ValueError("Recommended item must not be None.")
        if isinstance(item, str) and not item:
            raise ValueError("Recommended item must not be an empty string.")

    def _sort_key(self, recommendation: Recommendation) -> tuple[int, Any]:
        return (-recommendation.score.total, self._tie_breaker(recommendation.item))

    def _snapshot_scores(self) -> list[tuple[Any, Score]]:
        snapshot: list[tuple[Any, Score]] = []
        for stripe in self._stripes:
            with stripe.lock:
                snapshot.extend((item, r.score.copy()) for item, r in stripe.items.items())
        return snapshot

    # ── Writes ────────────────────────────────────────────────────────────────

    def get_or_create(self, item: Any) -> Recommendation:
        """Return the ``Recommendation`` for ``item``, creating it if absent.

        Concurrent callers for the same item all receive the same instance.

        Raises:
            ValueError: If ``item`` is ``None`` or an empty string.
        """
        self._check_item(item)
        stripe = self._stripe(item)
        with stripe.lock:
            recommendation = stripe.items.get(item)
            if recommendation is None:
                recommendation = Recommendation(item)
                stripe.items[item] = recommendation
            return recommendation

    def add(self, item: Any, score_name: str, value: int) -> None:
        """Add one partial score to ``item``'s recommendation.

        Raises:
            ValueError: If ``item`` is ``None``/empty, ``score_name`` is empty
                        or ``value`` is not an ``int``.
        """
        self._check_item(item)
        if not isinstance(score_name, str) or not score_name:
            raise ValueError(f"Partial score name must be a non-empty string, got {score_name!r}.")
        if not isinstance(value, int) or isinstance(value, bool):
            raise ValueError(f"Partial score {score_name!r} must be an int, got {value!r}.")

        stripe = self._stripe(item)
        with stripe.lock:
            recommendation = stripe.items.get(item)
            if recommendation is None:
                recommendation = Recommendation(item)
                stripe.items[item] = recommendation
            recommendation.add(score_name, value)

    def add_score(self, item: Any, score: Score) -> None:
        """Add every partial of ``score`` to ``item``'s recommendation.

        Raises:
            ValueError: If ``item`` or ``score`` is ``None``.
        """
        self._check_item(item)
        if score is None:
            raise ValueError("Score must not be None.")

        partials = score.copy()
        stripe = self._stripe(item)
        with stripe.lock:
            recommendation = stripe.items.get(item)
            if recommendation is None:
                recommendation = Recommendation(item)
                stripe.items[item] = recommendation
            recommendation.add_score(partials)

    def merge(self, other: "Recommendations") -> "Recommendations":
        """Merge ``other`` into this instance and return this instance.

        Per item, the merged score is the sum of both inputs' partial scores.
        ``other`` is left untouched; callers should use the returned object.
        """
        for item, score in other._snapshot_scores():
            self.add_score(item, score)
        return self

    def copy(self) -> "Recommendations":
        """Independent deep copy (same items, copied scores)."""
        clone = Recommendations(lock_stripes=len(self._stripes), tie_breaker=self._tie_breaker)
        return clone.merge(self)

    # ── Reads ─────────────────────────────────────────────────────────────────

    def get(self, item: Any = _MISSING, *, limit: Optional[int] = None):
        """Look up one recommendation, rank the top ``limit``, or snapshot all.

        ``get(item)`` returns the ``Recommendation`` for ``item``.
        ``get(limit=N)`` is equivalent to ``top(N)``.  ``limit`` is keyword-only
        because any hashable value, ints included, can be a recommended item:
        ``get(2)`` looks up the item ``2``.
        ``get()`` is equivalent to ``get_all()``.

        Raises:
            KeyError:   If ``item`` has never been contributed.
            ValueError: If ``item`` is ``None``/empty, or ``limit`` is negative.
        """
        if limit is not None:
            return self.top(limit)
        if item is _MISSING:
            return self.get_all()

        self._check_item(item)
        stripe = self._stripe(item)
        with stripe.lock:
            recommendation = stripe.items.get(item)
        if recommendation is None:
            raise KeyError(f"Item {item} is not amongst the recommendations.")
        return recommendation

    def get_all(self) -> set[Recommendation]:
        """Snapshot of all current recommendations (unordered)."""
        snapshot: set[Recommendation] = set()
        for stripe in self._stripes:
            with stripe.lock:
                snapshot.update(stripe.items.values())
        return snapshot

    def top(self, limit: int) -> list[Recommendation]:
        """Return up to ``limit`` recommendations ordered by decreasing total.

        Raises:
            ValueError: If ``limit`` is negative.
        """
        if limit < 0:
            raise ValueError(f"limit must be >= 0, got {limit}.")
        if limit == 0:
            return []
        ranked = sorted(self.get_all(), key=self._sort_key)
        return ranked[:limit]

    def has_enough(self, limit: int) -> bool:
        return self.size() >= limit

    def size(self) -> int:
        total = 0
        for stripe in self._stripes:
            with stripe.lock:
                total += len(stripe.items)
        return total

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, item: Any) -> bool:
        if item is None:
            return False
        stripe = self._stripe(item)
        with stripe.lock:
            return item in stripe.items

    def __repr__(self) -> str:
        return f"Recommendations(size={self.size()})"
