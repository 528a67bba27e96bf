"""
Scoring units of the friend-recommendation domain.

friends_in_common — friends of the subject's friends, scored by the number of
                    friends they share with the subject (Pareto 100/10).
random_people     — a seeded random sample of the population, contributed
                    without a partial score.  Listed last in ``engine.units``
                    so it only runs when earlier units found too few
                    candidates.
"""

from __future__ import annotations

import logging
import random
from collections import Counter
from typing import Iterable, Optional

from reco_engine.engine.base import BaseScoringUnit
from reco_engine.engine.context import RecommendationContext
from reco_engine.engine.registry import register_unit
from reco_engine.graph.people import PeopleGraph, Person
from reco_engine.result.recommendations import Recommendations
from reco_engine.transform.pareto import ParetoScoreTransformer

logger = logging.getLogger(__name__)


@register_unit("friends_in_common")
class FriendsInCommon(BaseScoringUnit):
    """Friends of friends, scored by how many friends they share with the subject."""

    name = "friends_in_common"
    score_name = "friendsInCommon"
    transformer = ParetoScoreTransformer(max_score=100, eighty_percent_level=10)

    def __init__(self, graph: PeopleGraph) -> None:
        self.graph = graph

    def produce(self, context: RecommendationContext) -> Iterable[tuple[Person, int]]:
        in_common: Counter[Person] = Counter()
        for friend in self.graph.friends_of(context.subject):
            in_common.update(self.graph.friends_of(friend))

        for candidate in sorted(in_common, key=lambda p: p.name):
            yield candidate, in_common[candidate]


@register_unit("random_people")
class RandomPeople:
    """Random members of the population, added as candidates with no score.

    Args:
        graph:       Population to sample from.
        seed:        Seed of the sampler; ``None`` for a fresh random sample.
        sample_size: People to sample per pass; defaults to ``2 * limit``.
    """

    name = "random_people"

    def __init__(
        self,
        graph: PeopleGraph,
        seed: Optional[int] = None,
        sample_size: Optional[int] = None,
    ) -> None:
        self.graph = graph
        self.seed = seed
        self.sample_size = sample_size

    def contribute(
        self,
        context: RecommendationContext,
        recommendations: Recommendations,
    ) -> None:
        eligible = [p for p in self.graph.persons() if context.allows(p)]
        wanted = self.sample_size if self.sample_size is not None else 2 * context.limit
        sample = random.Random(self.seed).sample(eligible, min(wanted, len(eligible)))

        for person in sample:
            if context.timed_out():
                break
            recommendations.get_or_create(person)

        logger.debug(
            "Unit [%s] added %d random candidate(s) for subject=%s",
            self.name, len(sample), context.subject,
        )

    def __repr__(self) -> str:
        return f"RandomPeople(seed={self.seed!r}, sample_size={self.sample_size!r})"
