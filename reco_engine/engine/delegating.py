"""
Delegating engine: runs a set of scoring units against one subject and ranks
the merged result.

Pass lifecycle
--------------
  1. Start     — receive a ``RecommendationContext`` (subject, limit, mode,
                 deadline, exclusions).
  2. Dispatch  — run every scoring unit against a fresh ``Recommendations``.
                 Sequential: units run in order; before each unit after the
                 first, dispatch stops if ``has_enough(limit)`` (early
                 termination) or the deadline has passed.
                 Parallel: units run in a ``ThreadPoolExecutor``; the engine
                 waits for all of them, or until ``has_enough(limit)`` or the
                 deadline.  With early termination every unit writes into its
                 own aggregator, and finished units are folded into the pass
                 in dispatch order under the same ``has_enough`` gate as
                 sequential dispatch; units past the gate are cancelled,
                 abandoned or discarded.  At the deadline, units still
                 running are abandoned: what they wrote before that point
                 stays, later writes are discarded.
  3. Merge     — nested engines (a ``DelegatingEngine`` is itself a scoring
                 unit) compute their own aggregator and ``merge`` it into the
                 parent's.  In parallel mode an abandoned pass is detached
                 from late writers by merging it into a fresh aggregator.
  4. Rank      — ``rank()`` orders by descending total (deterministic
                 tie-break) and truncates to the limit.

Failure isolation
-----------------
A unit that raises is logged and recorded in ``context.stats.failed``; the
pass continues with the remaining units.  There is no retry.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import TYPE_CHECKING, Any, Optional, Sequence

from reco_engine.engine.base import ScoringUnit
from reco_engine.engine.context import Mode, RecommendationContext
from reco_engine.result.recommendation import Recommendation
from reco_engine.result.recommendations import DEFAULT_LOCK_STRIPES, Recommendations

if TYPE_CHECKING:
    from reco_engine.config import EngineConfig

logger = logging.getLogger(__name__)


def rank(recommendations: Recommendations, context: RecommendationContext) -> list[Recommendation]:
    """Top ``context.limit`` recommendations that the context still allows."""
    if context.limit == 0:
        return []
    ranked = recommendations.top(recommendations.size())
    return [r for r in ranked if context.allows(r.item)][: context.limit]


class DelegatingEngine:
    """Composes scoring units into one ranking.

    Args:
        units:             Scoring units, in dispatch order.
        name:              Engine name used in logs (and when nested).
        parallel:          Run units concurrently in a thread pool.
        max_workers:       Thread-pool size in parallel mode.
        timeout_seconds:   Per-pass deadline used by ``recommend()``.
        early_termination: Stop dispatching once enough candidates exist.
        lock_stripes:      Lock stripes of each pass's aggregator.
    """

    def __init__(
        self,
        units: Sequence[ScoringUnit],
        name: str = "delegating",
        parallel: bool = False,
        max_workers: int = 4,
        timeout_seconds: Optional[float] = None,
        early_termination: bool = True,
        lock_stripes: int = DEFAULT_LOCK_STRIPES,
    ) -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}.")
        self.units = list(units)
        self.name = name
        self.parallel = parallel
        self.max_workers = max_workers
        self.timeout_seconds = timeout_seconds
        self.early_termination = early_termination
        self.lock_stripes = lock_stripes

    @classmethod
    def from_config(
        cls,
        units: Sequence[ScoringUnit],
        config: "EngineConfig",
        name: str = "delegating",
    ) -> "DelegatingEngine":
        return cls(
            units=units,
            name=name,
            parallel=config.parallel,
            max_workers=config.max_workers,
            timeout_seconds=config.timeout_seconds,
            early_termination=config.early_termination,
            lock_stripes=config.lock_stripes,
        )

    # ── Public API ────────────────────────────────────────────────────────────

    def recommend(
        self,
        subject: Any,
        limit: int,
        mode: Mode = Mode.REAL_TIME,
    ) -> list[Recommendation]:
        """Run a full pass for ``subject`` and return the ranked top ``limit``."""
        context = RecommendationContext.create(
            subject, limit, mode=mode, timeout_seconds=self.timeout_seconds
        )
        return rank(self.compute(context), context)

    def compute(self, context: RecommendationContext) -> Recommendations:
        """Dispatch every unit for ``context`` and return the merged aggregator."""
        recommendations = Recommendations(lock_stripes=self.lock_stripes)
        started = time.perf_counter()

        if self.parallel and len(self.units) > 1:
            recommendations = self._dispatch_parallel(context, recommendations)
        else:
            self._dispatch_sequential(context, recommendations)

        logger.debug(
            "Engine [%s] dispatched for subject=%s in %.1f ms | candidates=%d",
            self.name, context.subject,
            (time.perf_counter() - started) * 1000, recommendations.size(),
        )
        return recommendations

    def contribute(
        self,
        context: RecommendationContext,
        recommendations: Recommendations,
    ) -> None:
        """Scoring-unit protocol: merge this engine's own pass into ``recommendations``."""
        recommendations.merge(self.compute(context))

    # ── Dispatch ──────────────────────────────────────────────────────────────

    def _should_stop(self, context: RecommendationContext, recommendations: Recommendations) -> bool:
        if context.timed_out():
            return True
        return self.early_termination and recommendations.has_enough(context.limit)

    def _dispatch_sequential(
        self,
        context: RecommendationContext,
        recommendations: Recommendations,
    ) -> None:
        for index, unit in enumerate(self.units):
            if index > 0 and self._should_stop(context, recommendations):
                for skipped in self.units[index:]:
                    context.stats.record("skipped", skipped.name)
                logger.debug(
                    "Engine [%s] skipping %d unit(s) for subject=%s "
                    "(candidates=%d, timed_out=%s)",
                    self.name, len(self.units) - index, context.subject,
                    recommendations.size(), context.timed_out(),
                )
                return
            self._run_unit(unit, context, recommendations)

    def _dispatch_parallel(
        self,
        context: RecommendationContext,
        recommendations: Recommendations,
    ) -> Recommendations:
        # With early termination each unit writes into its own aggregator and
        # finished units are folded into the pass in dispatch order, so the
        # has_enough gate sees exactly what sequential dispatch would have.
        staged = self.early_termination
        targets = [
            Recommendations(lock_stripes=self.lock_stripes) if staged else recommendations
            for _ in self.units
        ]

        executor = ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(self.units)),
            thread_name_prefix=f"{self.name}-unit",
        )
        futures: list[Future] = [
            executor.submit(self._run_unit, unit, context, target)
            for unit, target in zip(self.units, targets)
        ]

        folded, gated = 0, False
        try:
            for future in as_completed(futures, timeout=context.remaining()):
                future.result()
                if staged:
                    folded, gated = self._fold(context, recommendations, futures, targets, folded)
                    if gated or folded == len(futures):
                        break
        except FuturesTimeoutError:
            logger.warning(
                "Engine [%s] deadline reached for subject=%s", self.name, context.subject
            )
            if staged:
                # Keep what unfinished units wrote before the deadline.
                folded, gated = self._fold(
                    context, recommendations, futures, targets, folded, finished_only=False
                )
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        if gated:
            logger.debug(
                "Engine [%s] has enough candidates (%d) for subject=%s; "
                "dropped %d later unit(s)",
                self.name, recommendations.size(), context.subject, len(futures) - folded,
            )

        unfinished = self._record_unfinished(futures, context)
        if not unfinished:
            return recommendations

        logger.log(
            logging.DEBUG if gated else logging.WARNING,
            "Engine [%s] stopped waiting for %d unit(s) for subject=%s: %s",
            self.name, len(unfinished), context.subject, ", ".join(unfinished),
        )
        if staged:
            return recommendations
        # Detach from units that are still writing into the shared aggregator.
        return recommendations.copy()

    def _fold(
        self,
        context: RecommendationContext,
        recommendations: Recommendations,
        futures: list[Future],
        staging: list[Recommendations],
        position: int,
        finished_only: bool = True,
    ) -> tuple[int, bool]:
        """Merge staged units into ``recommendations`` in dispatch order.

        Starts at ``position`` and stops at the first unit still running
        (unless ``finished_only`` is off) or once ``has_enough(limit)`` holds
        before a unit after the first.  Returns the new position and whether
        the has_enough gate closed.
        """
        while position < len(futures):
            if position > 0 and recommendations.has_enough(context.limit):
                return position, True
            if finished_only and not futures[position].done():
                break
            recommendations.merge(staging[position])
            position += 1
        return position, False

    def _record_unfinished(
        self,
        futures: list[Future],
        context: RecommendationContext,
    ) -> list[str]:
        unfinished: list[str] = []
        for future, unit in zip(futures, self.units):
            if future.cancelled():
                context.stats.record("skipped", unit.name)
                unfinished.append(unit.name)
            elif not future.done():
                context.stats.record("abandoned", unit.name)
                unfinished.append(unit.name)
        return unfinished

    def _run_unit(
        self,
        unit: ScoringUnit,
        context: RecommendationContext,
        recommendations: Recommendations,
    ) -> bool:
        """Run one unit, isolating its failure from the rest of the pass."""
        started = time.perf_counter()
        try:
            unit.contribute(context, recommendations)
        except Exception as exc:
            context.stats.record("failed", unit.name)
            logger.error(
                "Unit [%s] FAILED for subject=%s: %s",
                unit.name, context.subject, exc, exc_info=True,
            )
            return False

        context.stats.record("completed", unit.name)
        logger.debug(
            "Unit [%s] completed for subject=%s in %.1f ms",
            unit.name, context.subject, (time.perf_counter() - started) * 1000,
        )
        return True

    def __repr__(self) -> str:
        return (
            f"DelegatingEngine(name={self.name!r}, units={[u.name for u in self.units]}, "
            f"parallel={self.parallel})"
        )

