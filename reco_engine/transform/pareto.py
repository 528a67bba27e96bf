"""
Pareto (80/20) score transformer.

Maps a non-negative raw value onto ``[0, max_score]`` along an exponential
saturation curve::

    f(x) = max_score * (1 - exp(-alpha * x)),   alpha = ln(5) / eighty_percent_level

At ``x == eighty_percent_level`` the curve reaches exactly 80% of
``max_score`` (``1 - exp(-ln 5) == 0.8``): a small input already captures most
of the achievable score, and every further unit of input adds less than the
previous one.  The result is rounded half-up and capped at ``max_score``.

Reference values for ``ParetoScoreTransformer(100, 10)``
---------------------------------------------------------
    x     : 0  1   2   3   5   10  20  50   100  10000
    f(x)  : 0  15  28  38  55  80  96  100  100  100
"""

from __future__ import annotations

import math
from typing import Any

from reco_engine.transform.base import round_half_up


class ParetoScoreTransformer:
    """Diminishing-returns transformer calibrated by its 80% level.

    Args:
        max_score:            Asymptotic ceiling of the curve (> 0).
        eighty_percent_level: Input at which the curve reaches 80% of
                              ``max_score`` (> 0).
        minimum_threshold:    Inputs below this value score 0.
    """

    def __init__(
        self,
        max_score: int,
        eighty_percent_level: float,
        minimum_threshold: float = 0.0,
    ) -> None:
        if max_score <= 0:
            raise ValueError(f"max_score must be > 0, got {max_score}.")
        if eighty_percent_level <= 0:
            raise ValueError(
                f"eighty_percent_level must be > 0, got {eighty_percent_level}."
            )
        self.max_score = max_score
        self.eighty_percent_level = eighty_percent_level
        self.minimum_threshold = minimum_threshold
        self._alpha = math.log(5) / eighty_percent_level

    def transform(self, item: Any, value: float) -> int:
        if value <= 0 or value < self.minimum_threshold:
            return 0
        raw = self.max_score * (1.0 - math.exp(-self._alpha * value))
        return min(self.max_score, round_half_up(raw))

    def __repr__(self) -> str:
        return (
            f"ParetoScoreTransformer(max_score={self.max_score}, "
            f"eighty_percent_level={self.eighty_percent_level}, "
            f"minimum_threshold={self.minimum_threshold})"
        )
