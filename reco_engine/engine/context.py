"""
Per-pass recommendation context and execution mode.

A ``RecommendationContext`` is created once per scoring pass.  It carries the
subject, the requested limit, the execution mode, the optional deadline, and
the exclusion rules (blacklist + filters) that every scoring unit consults via
``allows()``.  ``stats`` records what happened to each unit during dispatch.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterable, Optional

if TYPE_CHECKING:
    from reco_engine.engine.base import Blacklist, Filter


class Mode(str, Enum):
    """Execution mode of a recommendation request.

    REAL_TIME:   compute the ranking now.
    PRECOMPUTED: serve the ranking cached by the background precompute;
                 compute in real time when nothing is cached yet.
    """

    REAL_TIME = "real-time"
    PRECOMPUTED = "precomputed"


@dataclass
class DispatchStats:
    """Outcome of each scoring unit in one pass.

    Attributes:
        completed: Units that finished normally.
        failed:    Units that raised; they contributed whatever they wrote
                   before failing.
        skipped:   Units never started (early termination or deadline).
        abandoned: Units still running when the engine stopped waiting.
    """

    completed: list[str] = field(default_factory=list)
    failed:    list[str] = field(default_factory=list)
    skipped:   list[str] = field(default_factory=list)
    abandoned: list[str] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def record(self, outcome: str, unit_name: str) -> None:
        with self._lock:
            getattr(self, outcome).append(unit_name)


@dataclass
class RecommendationContext:
    """Everything a scoring unit needs to know about the current pass.

    Attributes:
        subject:   Entity recommendations are computed for.
        limit:     Number of recommendations requested.
        mode:      Execution mode of the originating request.
        deadline:  ``time.monotonic()`` value after which units should stop,
                   or ``None`` for no deadline.
        blacklist: Items that must never be recommended to ``subject``.
        filters:   Per-item predicates that must all accept an item.
        stats:     Per-unit dispatch outcomes, filled in by the engine.
    """

    subject:   Any
    limit:     int
    mode:      Mode = Mode.REAL_TIME
    deadline:  Optional[float] = None
    blacklist: frozenset = frozenset()
    filters:   tuple["Filter", ...] = ()
    stats:     DispatchStats = field(default_factory=DispatchStats)

    def __post_init__(self) -> None:
        if self.subject is None:
            raise ValueError("Subject must not be None.")
        if self.limit < 0:
            raise ValueError(f"limit must be >= 0, got {self.limit}.")

    @classmethod
    def create(
        cls,
        subject: Any,
        limit: int,
        mode: Mode = Mode.REAL_TIME,
        timeout_seconds: Optional[float] = None,
        blacklists: Iterable["Blacklist"] = (),
        filters: Iterable["Filter"] = (),
    ) -> "RecommendationContext":
        """Build a context, evaluating every blacklist once for ``subject``."""
        excluded: set[Any] = set()
        for blacklist in blacklists:
            excluded.update(blacklist.build(subject))

        deadline = None
        if timeout_seconds is not None:
            deadline = time.monotonic() + timeout_seconds

        return cls(
            subject=subject,
            limit=limit,
            mode=mode,
            deadline=deadline,
            blacklist=frozenset(excluded),
            filters=tuple(filters),
        )

    def allows(self, item: Any) -> bool:
        """True if ``item`` may be recommended to the subject."""
        if item is None or item in self.blacklist:
            return False
        return all(f.include(self.subject, item) for f in self.filters)

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline (never negative), or ``None``."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def timed_out(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline
