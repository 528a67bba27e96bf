"""
Composite score: named partial scores plus their running total.

A ``Score`` starts empty when a candidate first appears and is mutated in
place by every contribution.  Adding a partial score under a name that is
already present increments it — partial scores are never overwritten.

The total is maintained incrementally so ``total`` is O(1); ``recompute_total``
exists for callers that want to assert the invariant explicitly.

String form (used by reporters)::

    {total:19,ageDifference:-6,friendsInCommon:15,sameGender:10}

Partial scores are rendered sorted by name so the output is stable.
"""

from __future__ import annotations

from typing import Iterator


class Score:
    """Accumulator of named integer partial scores.

    Not thread-safe on its own: concurrent writers must go through
    ``Recommendations``, which serialises writes per candidate.
    """

    __slots__ = ("_partials", "_total")

    def __init__(self, partials: dict[str, int] | None = None) -> None:
        self._partials: dict[str, int] = {}
        self._total = 0
        for name, value in (partials or {}).items():
            self.add(name, value)

    # ── Mutation ──────────────────────────────────────────────────────────────

    def add(self, name: str, value: int) -> None:
        """Add ``value`` to the partial score called ``name``.

        Args:
            name:  Partial score name. Must be a non-empty string.
            value: Integer contribution (may be negative).

        Raises:
            ValueError: If ``name`` is empty or not a string, or ``value`` is
                        not an ``int`` (``bool`` is rejected).
        """
        if not isinstance(name, str) or not name:
            raise ValueError(f"Partial score name must be a non-empty string, got {name!r}.")
        if not isinstance(value, int) or isinstance(value, bool):
            raise ValueError(f"Partial score {name!r} must be an int, got {value!r}.")
        self._partials[name] = self._partials.get(name, 0) + value
        self._total += value

    def add_score(self, other: "Score") -> None:
        """Merge every partial score of ``other`` into this one (summed by name)."""
        if other is None:
            raise ValueError("Score to add must not be None.")
        for name, value in other.items():
            self.add(name, value)

    # ── Read access ───────────────────────────────────────────────────────────

    @property
    def total(self) -> int:
        return self._total

    def get_total_score(self) -> int:
        return self._total

    def get(self, name: str) -> int:
        """Return the partial score called ``name`` (0 if never contributed)."""
        return self._partials.get(name, 0)

    def items(self) -> list[tuple[str, int]]:
        """Partial scores as ``(name, value)`` pairs, sorted by name."""
        return sorted(self._partials.items())

    def as_dict(self) -> dict[str, int]:
        return dict(self.items())

    def recompute_total(self) -> int:
        return sum(self._partials.values())

    def copy(self) -> "Score":
        return Score(dict(self._partials))

    def __iter__(self) -> Iterator[tuple[str, int]]:
        return iter(self.items())

    def __len__(self) -> int:
        return len(self._partials)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Score):
            return NotImplemented
        return self._partials == other._partials

    def __str__(self) -> str:
        parts = [f"total:{self._total}"] + [f"{name}:{value}" for name, value in self.items()]
        return "{" + ",".join(parts) + "}"

    def __repr__(self) -> str:
        return f"Score(total={self._total}, partials={self.as_dict()!r})"
