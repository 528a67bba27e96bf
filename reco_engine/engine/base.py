"""
Contracts for the pluggable pieces of a recommendation engine.

Scoring units
-------------
A ``ScoringUnit`` contributes partial scores for candidates of the subject
into a shared ``Recommendations`` instance.  Units may run concurrently with
other units against the same aggregator, so they must only write through the
aggregator's ``add`` / ``add_score`` / ``get_or_create`` methods and must never
assume exclusive access to a candidate.

Most units generate ``(candidate, raw_value)`` pairs and write a single named
partial score; ``BaseScoringUnit`` implements that loop::

    class FriendsInCommon(BaseScoringUnit):
        name = "friends_in_common"
        score_name = "friendsInCommon"
        transformer = ParetoScoreTransformer(100, 10)

        def produce(self, context):
            for candidate, count in ...:
                yield candidate, count

Post-processors, blacklists and filters
---------------------------------------
``PostProcessor`` rescores candidates after every unit has run.
``Blacklist`` produces items excluded for a subject, once per pass.
``Filter`` decides per item; all filters must accept an item.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Iterable, Protocol, runtime_checkable

from reco_engine.engine.context import RecommendationContext
from reco_engine.result.recommendations import Recommendations
from reco_engine.transform.base import NoTransformation, ScoreTransformer

logger = logging.getLogger(__name__)


@runtime_checkable
class ScoringUnit(Protocol):
    """Pluggable producer of partial scores."""

    name: str

    def contribute(
        self,
        context: RecommendationContext,
        recommendations: Recommendations,
    ) -> None:
        ...


@runtime_checkable
class PostProcessor(Protocol):
    """Rescores the candidates collected during dispatch."""

    name: str

    def process(
        self,
        context: RecommendationContext,
        recommendations: Recommendations,
    ) -> None:
        ...


@runtime_checkable
class Blacklist(Protocol):
    """Items that must never be recommended to a subject."""

    def build(self, subject: Any) -> Iterable[Any]:
        ...


@runtime_checkable
class Filter(Protocol):
    """Per-item inclusion rule."""

    def include(self, subject: Any, item: Any) -> bool:
        ...


class BaseScoringUnit(ABC):
    """Scoring unit that writes one named partial score per produced candidate.

    Subclasses must:
      1. Set ``name`` and ``score_name`` class variables.
      2. Implement ``produce(context)`` yielding ``(candidate, raw_value)``.

    Optionally set ``transformer`` to rescale raw values; the default keeps
    them as they are (rounded to int).

    Candidates rejected by ``context.allows()`` are skipped.  Production stops
    early once the pass deadline has passed.
    """

    name: str        # Override in subclass
    score_name: str  # Override in subclass
    transformer: ScoreTransformer = NoTransformation()

    def contribute(
        self,
        context: RecommendationContext,
        recommendations: Recommendations,
    ) -> None:
        written = 0
        for candidate, raw_value in self.produce(context):
            if context.timed_out():
                logger.debug(
                    "Unit [%s] stopping at deadline after %d contribution(s).",
                    self.name, written,
                )
                break
            if not context.allows(candidate):
                continue
            value = self.transformer.transform(candidate, raw_value)
            recommendations.add(candidate, self.score_name, value)
            written += 1

        logger.debug(
            "Unit [%s] contributed %d partial score(s) for subject=%s",
            self.name, written, context.subject,
        )

    @abstractmethod
    def produce(self, context: RecommendationContext) -> Iterable[tuple[Any, float]]:
        """Yield ``(candidate, raw_value)`` pairs for ``context.subject``."""
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
