"""
Tests for reco_engine/engine/top_level.py.

What we test
------------
RecommendationEngine:
  - REAL_TIME: blacklists/filters applied, post-processors rescore, result
    ranked and truncated, reporter receives the ranking.
  - PRECOMPUTED with a cache hit: cached list served, truncated to limit,
    no recomputation.
  - PRECOMPUTED with a miss: identical to REAL_TIME; nothing is cached.
  - PRECOMPUTED with a failing cache read: falls back to real time.
  - compute_and_cache(): writes max_precomputed entries; needs a cache.
  - Post-processor and reporter failures are isolated.
  - default_limit applies when no limit is passed; negative limit / None
    subject raise ValueError.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from reco_engine.cache.base import InMemoryCacheStore
from reco_engine.engine.base import BaseScoringUnit
from reco_engine.engine.context import Mode
from reco_engine.engine.delegating import DelegatingEngine
from reco_engine.engine.top_level import RecommendationEngine
from reco_engine.reporting.reporter import RememberingRecommendationLogger
from reco_engine.result.recommendation import Recommendation
from reco_engine.result.score import Score


# ── Doubles ───────────────────────────────────────────────────────────────────

class StaticUnit(BaseScoringUnit):
    name = "static"
    score_name = "base"

    def __init__(self, scores: dict) -> None:
        self.scores = scores
        self.calls = 0

    def produce(self, context):
        self.calls += 1
        yield from self.scores.items()


class Bonus:
    name = "bonus"

    def __init__(self, item, value: int) -> None:
        self.item = item
        self.value = value

    def process(self, context, recommendations):
        if self.item in recommendations:
            recommendations.add(self.item, "bonus", self.value)


class Exploding:
    name = "exploding"

    def process(self, context, recommendations):
        raise RuntimeError("post-processor failure")


class StaticBlacklist:
    def __init__(self, items) -> None:
        self.items = set(items)

    def build(self, subject):
        return self.items


class NotSubject:
    def include(self, subject, item):
        return item != subject


SCORES = {"me": 100, "friend": 90, "a": 10, "b": 20, "c": 30}


def _engine(unit=None, **kwargs) -> RecommendationEngine:
    unit = unit or StaticUnit(SCORES)
    kwargs.setdefault("blacklists", [StaticBlacklist({"friend"})])
    kwargs.setdefault("filters", [NotSubject()])
    return RecommendationEngine(DelegatingEngine([unit]), **kwargs)


def _items(ranked) -> list:
    return [r.item for r in ranked]


class TestRealTime:
    def test_exclusions_and_ranking(self):
        assert _items(_engine().recommend("me", limit=2)) == ["c", "b"]

    def test_post_processor_rescores(self):
        engine = _engine(post_processors=[Bonus("a", 50)])
        ranked = engine.recommend("me", limit=3)
        assert _items(ranked) == ["a", "c", "b"]
        assert ranked[0].score.as_dict() == {"base": 10, "bonus": 50}

    def test_post_processor_failure_isolated(self, caplog):
        engine = _engine(post_processors=[Exploding(), Bonus("a", 50)])
        with caplog.at_level("ERROR"):
            ranked = engine.recommend("me", limit=1)
        assert _items(ranked) == ["a"]
        assert "exploding" in caplog.text

    def test_reporter_receives_ranking(self):
        reporter = RememberingRecommendationLogger()
        _engine(reporter=reporter).recommend("me", limit=1)
        assert reporter.get("me") == "Computed recommendations for me: (c {total:30,base:30})"

    def test_reporter_failure_isolated(self):
        reporter = MagicMock()
        reporter.log.side_effect = RuntimeError("reporter down")
        assert _items(_engine(reporter=reporter).recommend("me", limit=1)) == ["c"]

    def test_default_limit(self):
        assert len(_engine(default_limit=2).recommend("me")) == 2

    def test_limit_zero(self):
        assert _engine().recommend("me", limit=0) == []

    def test_negative_limit_rejected(self):
        with pytest.raises(ValueError):
            _engine().recommend("me", limit=-1)

    def test_none_subject_rejected(self):
        with pytest.raises(ValueError):
            _engine().recommend(None)


class TestPrecomputed:
    def test_cache_hit_served_truncated(self):
        unit = StaticUnit(SCORES)
        cache = InMemoryCacheStore()
        cached = [
            Recommendation("x", Score({"base": 3})),
            Recommendation("y", Score({"base": 2})),
            Recommendation("z", Score({"base": 1})),
        ]
        cache.put("me", cached)

        ranked = _engine(unit, cache=cache).recommend("me", Mode.PRECOMPUTED, limit=2)

        assert _items(ranked) == ["x", "y"]
        assert unit.calls == 0

    def test_miss_falls_back_without_caching(self):
        cache = InMemoryCacheStore()
        engine = _engine(cache=cache)

        precomputed = engine.recommend("me", Mode.PRECOMPUTED, limit=3)
        real_time = engine.recommend("me", Mode.REAL_TIME, limit=3)

        assert [(r.item, r.total) for r in precomputed] == [(r.item, r.total) for r in real_time]
        assert "me" not in cache

    def test_mode_accepts_string_value(self):
        assert _items(_engine().recommend("me", "precomputed", limit=1)) == ["c"]

    def test_cache_read_failure_falls_back(self):
        cache = MagicMock()
        cache.get.side_effect = RuntimeError("disk gone")
        ranked = _engine(cache=cache).recommend("me", Mode.PRECOMPUTED, limit=1)
        assert _items(ranked) == ["c"]

    def test_compute_and_cache(self):
        cache = InMemoryCacheStore()
        engine = _engine(cache=cache, max_precomputed=2)

        stored = engine.compute_and_cache("me")

        assert _items(stored) == ["c", "b"]
        assert _items(cache.get("me")) == ["c", "b"]
        assert _items(engine.recommend("me", Mode.PRECOMPUTED, limit=5)) == ["c", "b"]

    def test_compute_and_cache_needs_cache(self):
        with pytest.raises(RuntimeError):
            _engine().compute_and_cache("me")

    def test_cached_copy_not_mutated_by_reader(self):
        cache = InMemoryCacheStore()
        engine = _engine(cache=cache)
        engine.compute_and_cache("me")

        first = engine.recommend("me", Mode.PRECOMPUTED, limit=1)
        first[0].add("tampered", 1000)

        assert engine.recommend("me", Mode.PRECOMPUTED, limit=1)[0].total == 30
