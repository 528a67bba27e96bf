"""
Background precomputation of rankings for a subject population.

Each ``run_cycle()`` call (one scheduler tick) takes the next ``batch_size``
subjects from the population, computes their rankings through the
recommendation engine and stores them in the engine's cache.  The position in
the population is remembered between ticks and wraps around at the end, so
successive ticks sweep the whole population repeatedly.

A subject that fails (engine error, cache write error) is logged and counted;
the cycle continues with the next subject.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Iterable, Sequence

from reco_engine.engine.top_level import RecommendationEngine
from reco_engine.utils.time_utils import utcnow

logger = logging.getLogger(__name__)

Population = Callable[[], Sequence[Any]]


@dataclass
class PrecomputeCycleResult:
    """Outcome of one precompute cycle."""

    started_at: datetime
    finished_at: datetime | None = None
    succeeded: list[Any] = field(default_factory=list)
    failed: list[Any] = field(default_factory=list)
    next_position: int = 0

    @property
    def processed(self) -> int:
        return len(self.succeeded) + len(self.failed)

    @property
    def success(self) -> bool:
        return not self.failed


class PrecomputeModule:
    """Drives ``RecommendationEngine.compute_and_cache`` over a population.

    Args:
        engine:     Engine with a cache store.
        population: Callable returning the current subjects, in a stable order.
        batch_size: Subjects processed per ``run_cycle()``.
    """

    def __init__(
        self,
        engine: RecommendationEngine,
        population: Population,
        batch_size: int = 100,
    ) -> None:
        if engine.cache is None:
            raise ValueError("PrecomputeModule needs an engine with a cache store.")
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}.")
        self.engine = engine
        self.population = population
        self.batch_size = batch_size
        self._position = 0
        self._lock = threading.Lock()

    @property
    def position(self) -> int:
        return self._position

    def compute_and_cache(self, subject: Any) -> bool:
        """Precompute one subject.  Returns ``False`` (and logs) on failure."""
        started = time.perf_counter()
        try:
            ranked = self.engine.compute_and_cache(subject)
        except Exception as exc:
            logger.error("Precompute FAILED for subject=%s: %s", subject, exc, exc_info=True)
            return False
        logger.debug(
            "Precomputed %d recommendation(s) for %s in %.1f ms",
            len(ranked), subject, (time.perf_counter() - started) * 1000,
        )
        return True

    def run_cycle(self) -> PrecomputeCycleResult:
        """Process the next batch of the population."""
        with self._lock:
            subjects = list(self.population())
            result = PrecomputeCycleResult(started_at=utcnow())
            if not subjects:
                logger.info("Precompute cycle skipped: empty population.")
                result.finished_at = utcnow()
                return result

            start = self._position % len(subjects)
            count = min(self.batch_size, len(subjects))
            batch = [subjects[(start + i) % len(subjects)] for i in range(count)]
            self._position = (start + count) % len(subjects)

            self._run_batch(batch, result)
            result.next_position = self._position
            result.finished_at = utcnow()

        logger.info(
            "Precompute cycle done | processed=%d failed=%d next_position=%d",
            result.processed, len(result.failed), result.next_position,
        )
        return result

    def run_all(self, subjects: Iterable[Any] | None = None) -> PrecomputeCycleResult:
        """Precompute every subject once (the whole population by default).

        Does not move the batch position used by ``run_cycle()``.
        """
        batch = list(self.population() if subjects is None else subjects)
        result = PrecomputeCycleResult(started_at=utcnow(), next_position=self._position)
        self._run_batch(batch, result)
        result.finished_at = utcnow()
        logger.info(
            "Precomputed %d subject(s) | failed=%d", result.processed, len(result.failed)
        )
        return result

    def _run_batch(self, batch: Sequence[Any], result: PrecomputeCycleResult) -> None:
        for subject in batch:
            if self.compute_and_cache(subject):
                result.succeeded.append(subject)
            else:
                result.failed.append(subject)
