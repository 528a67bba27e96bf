"""
Top-level recommendation engine: the single entry point callers use.

Wraps a ``DelegatingEngine`` (the scoring units) with everything that happens
around a pass:

  - exclusion rules (blacklists + filters) built into the pass context,
  - post-processors that rescore candidates after dispatch,
  - ranking and truncation,
  - the result reporter,
  - the cache used by ``Mode.PRECOMPUTED``.

Execution modes
---------------
``Mode.REAL_TIME``   — run the full pipeline for every request.
``Mode.PRECOMPUTED`` — serve the cached ranking for the subject, truncated to
                       the request limit.  On a miss (or when the cache cannot
                       be read) the identical real-time pipeline runs instead;
                       the fallback result is not written to the cache.

Only ``compute_and_cache()`` (called by the precompute module) writes to the
cache.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional, Sequence

from reco_engine.engine.context import Mode, RecommendationContext
from reco_engine.engine.delegating import DelegatingEngine, rank
from reco_engine.result.recommendation import Recommendation

if TYPE_CHECKING:
    from reco_engine.cache.base import CacheStore
    from reco_engine.engine.base import Blacklist, Filter, PostProcessor
    from reco_engine.reporting.reporter import RecommendationLogger

logger = logging.getLogger(__name__)


class RecommendationEngine:
    """Full recommendation pipeline for one domain.

    Args:
        delegate:         Engine running the scoring units.
        post_processors:  Rescoring steps run in order after dispatch.
        blacklists:       Sources of items never recommended to a subject.
        filters:          Per-item inclusion rules.
        cache:            Store backing ``Mode.PRECOMPUTED``; optional.
        reporter:         Receives every computed ranking; optional.
        default_limit:    Limit used when a request does not pass one.
        max_precomputed:  Number of recommendations cached per subject.
    """

    def __init__(
        self,
        delegate: DelegatingEngine,
        post_processors: Sequence["PostProcessor"] = (),
        blacklists: Sequence["Blacklist"] = (),
        filters: Sequence["Filter"] = (),
        cache: Optional["CacheStore"] = None,
        reporter: Optional["RecommendationLogger"] = None,
        default_limit: int = 10,
        max_precomputed: int = 10,
    ) -> None:
        if default_limit < 0:
            raise ValueError(f"default_limit must be >= 0, got {default_limit}.")
        if max_precomputed < 0:
            raise ValueError(f"max_precomputed must be >= 0, got {max_precomputed}.")
        self.delegate = delegate
        self.post_processors = list(post_processors)
        self.blacklists = list(blacklists)
        self.filters = list(filters)
        self.cache = cache
        self.reporter = reporter
        self.default_limit = default_limit
        self.max_precomputed = max_precomputed

    # ── Public API ────────────────────────────────────────────────────────────

    def recommend(
        self,
        subject: Any,
        mode: Mode = Mode.REAL_TIME,
        limit: Optional[int] = None,
    ) -> list[Recommendation]:
        """Return up to ``limit`` ranked recommendations for ``subject``.

        Raises:
            ValueError: If ``subject`` is ``None`` or ``limit`` is negative.
        """
        if subject is None:
            raise ValueError("Subject must not be None.")
        limit = self.default_limit if limit is None else limit
        if limit < 0:
            raise ValueError(f"limit must be >= 0, got {limit}.")

        mode = Mode(mode)
        if mode is Mode.PRECOMPUTED:
            cached = self._read_cache(subject)
            if cached is not None:
                return cached[:limit]

        return self._compute(subject, limit, mode)

    def compute_and_cache(self, subject: Any, limit: Optional[int] = None) -> list[Recommendation]:
        """Compute the ranking for ``subject`` and store it in the cache.

        Raises:
            RuntimeError: If the engine has no cache.
        """
        if self.cache is None:
            raise RuntimeError("compute_and_cache() needs an engine with a cache store.")
        ranked = self._compute(
            subject, self.max_precomputed if limit is None else limit, Mode.PRECOMPUTED
        )
        self.cache.put(subject, ranked)
        return ranked

    # ── Internal helpers ──────────────────────────────────────────────────────

    def _read_cache(self, subject: Any) -> Optional[list[Recommendation]]:
        if self.cache is None:
            logger.debug("No cache configured; computing %s in real time.", subject)
            return None
        try:
            cached = self.cache.get(subject)
        except Exception as exc:
            logger.error(
                "Cache read failed for subject=%s, computing in real time: %s",
                subject, exc, exc_info=True,
            )
            return None
        if cached is None:
            logger.info("No precomputed recommendations for %s; computing in real time.", subject)
        return cached

    def _compute(self, subject: Any, limit: int, mode: Mode) -> list[Recommendation]:
        context = RecommendationContext.create(
            subject,
            limit,
            mode=mode,
            timeout_seconds=self.delegate.timeout_seconds,
            blacklists=self.blacklists,
            filters=self.filters,
        )
        recommendations = self.delegate.compute(context)

        for processor in self.post_processors:
            try:
                processor.process(context, recommendations)
            except Exception as exc:
                logger.error(
                    "Post-processor [%s] FAILED for subject=%s: %s",
                    processor.name, subject, exc, exc_info=True,
                )

        ranked = rank(recommendations, context)
        if context.stats.failed or context.stats.abandoned:
            logger.warning(
                "Degraded pass for subject=%s | failed=%s abandoned=%s",
                subject, context.stats.failed, context.stats.abandoned,
            )

        if self.reporter is not None:
            try:
                self.reporter.log(subject, ranked, context)
            except Exception as exc:
                logger.error("Reporter FAILED for subject=%s: %s", subject, exc, exc_info=True)
        return ranked

    def __repr__(self) -> str:
        return (
            f"RecommendationEngine(delegate={self.delegate!r}, "
            f"post_processors={[p.name for p in self.post_processors]})"
        )
