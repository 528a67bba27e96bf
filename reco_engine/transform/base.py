"""
Score transformer protocol.

A transformer maps a raw, unbounded metric produced by a scoring unit (a count,
an age gap, a distance) onto the integer partial score that is written into
``Recommendations``.  Transformers are stateless and safe to share between
threads.
"""

from __future__ import annotations

import math
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ScoreTransformer(Protocol):
    """Maps a raw value to an integer partial score."""

    def transform(self, item: Any, value: float) -> int:
        """Transform ``value`` observed for ``item``.  ``item`` may be ``None``."""
        ...


class NoTransformation:
    """Identity transformer: the raw value, rounded half-up to an int."""

    def transform(self, item: Any, value: float) -> int:
        return round_half_up(value)

    def __repr__(self) -> str:
        return "NoTransformation()"


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves rounding towards +infinity.

    Python's built-in ``round`` uses banker's rounding (``round(2.5) == 2``),
    which would make partial scores depend on the parity of the neighbour.
    """
    return int(math.floor(value + 0.5))
