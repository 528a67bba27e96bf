"""
A single recommended item bound to its composite ``Score``.
"""

from __future__ import annotations

from typing import Any

from reco_engine.result.score import Score


class Recommendation:
    """One candidate item and the score it has accumulated during a pass.

    Identity is the item: the aggregator guarantees at most one
    ``Recommendation`` per item.  Instances are mutable and not thread-safe;
    ``Recommendations`` owns them and serialises writes.

    Attributes:
        item:  The recommended item (any hashable, non-empty identity).
        score: The accumulated ``Score``.
    """

    __slots__ = ("item", "score")

    def __init__(self, item: Any, score: Score | None = None) -> None:
        self.item = item
        self.score = score if score is not None else Score()

    def add(self, name: str, value: int) -> None:
        self.score.add(name, value)

    def add_score(self, score: Score) -> None:
        self.score.add_score(score)

    @property
    def total(self) -> int:
        return self.score.total

    def __str__(self) -> str:
        return f"({self.item} {self.score})"

    def __repr__(self) -> str:
        return f"Recommendation(item={self.item!r}, score={self.score!r})"
