"""
Persisted form of a precomputed ranking.

``CachedRanking`` is what the sqlite cache store writes for one subject: the
subject key, when the ranking was computed, and the ordered entries.  Items
are stored by key (``str(item)``); the store resolves keys back to domain
objects on read.

Both models are frozen — a cached ranking is replaced wholesale, never edited.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from reco_engine.result.recommendation import Recommendation
from reco_engine.result.score import Score


class RankedEntry(BaseModel):
    """One recommended item and its partial scores.

    Attributes:
        item_key: ``str(item)`` of the recommended item.
        total:    Total score at the time of computation.
        partials: Partial scores by name.
    """

    model_config = ConfigDict(frozen=True)

    item_key: str
    total: int
    partials: dict[str, int] = {}

    @field_validator("item_key")
    @classmethod
    def validate_item_key(cls, v: str) -> str:
        if not v:
            raise ValueError("item_key must not be empty.")
        return v

    @model_validator(mode="after")
    def validate_total(self) -> "RankedEntry":
        if self.total != sum(self.partials.values()):
            raise ValueError(
                f"total ({self.total}) must equal the sum of partials "
                f"({sum(self.partials.values())}) for item '{self.item_key}'."
            )
        return self

    @classmethod
    def from_recommendation(cls, recommendation: Recommendation) -> "RankedEntry":
        return cls(
            item_key=str(recommendation.item),
            total=recommendation.total,
            partials=recommendation.score.as_dict(),
        )

    def to_score(self) -> Score:
        return Score(dict(self.partials))


class CachedRanking(BaseModel):
    """Ranked recommendations for one subject, best first."""

    model_config = ConfigDict(frozen=True)

    subject_key: str
    computed_at: datetime
    entries: list[RankedEntry] = []

    @model_validator(mode="after")
    def validate_order(self) -> "CachedRanking":
        totals = [e.total for e in self.entries]
        if any(a < b for a, b in zip(totals, totals[1:])):
            raise ValueError(f"Entries for '{self.subject_key}' are not sorted by total.")
        return self
