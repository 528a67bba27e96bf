"""
Post-processors of the friend-recommendation domain.

Each one visits every candidate collected during dispatch and adds one named
partial score comparing the candidate with the subject.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

from reco_engine.engine.context import RecommendationContext
from reco_engine.graph.people import Person
from reco_engine.result.recommendations import Recommendations
from reco_engine.transform.pareto import ParetoScoreTransformer

logger = logging.getLogger(__name__)


class PersonPostProcessor(ABC):
    """Adds ``score_name`` to every candidate for which ``score()`` returns a value."""

    name: str        # Override in subclass
    score_name: str  # Override in subclass

    def process(self, context: RecommendationContext, recommendations: Recommendations) -> None:
        subject: Person = context.subject
        for recommendation in recommendations.get_all():
            value = self.score(subject, recommendation.item)
            if value is not None:
                recommendations.add(recommendation.item, self.score_name, value)

    @abstractmethod
    def score(self, subject: Person, candidate: Person) -> Optional[int]:
        """Partial score for ``candidate``, or ``None`` to leave it untouched."""
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class RewardSameGender(PersonPostProcessor):
    name = "reward_same_gender"
    score_name = "sameGender"

    def __init__(self, reward: int = 10) -> None:
        self.reward = reward

    def score(self, subject: Person, candidate: Person) -> Optional[int]:
        return self.reward if subject.gender == candidate.gender else None


class RewardSameLocation(PersonPostProcessor):
    """Rewards candidates living in the subject's city (both must have one)."""

    name = "reward_same_location"
    score_name = "sameLocation"

    def __init__(self, reward: int = 10) -> None:
        self.reward = reward

    def score(self, subject: Person, candidate: Person) -> Optional[int]:
        if subject.city and subject.city == candidate.city:
            return self.reward
        return None


class PenalizeAgeDifference(PersonPostProcessor):
    """Penalty growing with the age gap: ``-Pareto(max_penalty, level)(|Δage|)``."""

    name = "penalize_age_difference"
    score_name = "ageDifference"

    def __init__(self, max_penalty: int = 10, eighty_percent_level: float = 20) -> None:
        self.transformer = ParetoScoreTransformer(max_penalty, eighty_percent_level)

    def score(self, subject: Person, candidate: Person) -> Optional[int]:
        return -self.transformer.transform(candidate, abs(subject.age - candidate.age))
