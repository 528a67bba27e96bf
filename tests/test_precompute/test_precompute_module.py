"""
Tests for reco_engine/precompute/module.py.

What we test
------------
PrecomputeModule:
  - Requires an engine with a cache; batch_size >= 1.
  - run_cycle() processes batch_size subjects and remembers its position,
    wrapping around the end of the population.
  - A failing subject is counted and logged; the cycle continues.
  - run_all() covers the population (or the given subjects) once and
    leaves the cycle position alone.
  - Empty population -> empty result.
  - After a cycle, precomputed mode serves the cached ranking.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from reco_engine.cache.base import InMemoryCacheStore
from reco_engine.engine.context import Mode
from reco_engine.friends.engine import build_friends_engine
from reco_engine.precompute.module import PrecomputeModule


# ── Helpers ───────────────────────────────────────────────────────────────────

def _mock_engine(fail_for=()):
    engine = MagicMock()
    engine.cache = InMemoryCacheStore()

    def compute_and_cache(subject):
        if subject in fail_for:
            raise RuntimeError(f"cannot compute {subject}")
        return []

    engine.compute_and_cache.side_effect = compute_and_cache
    return engine


class TestConstruction:
    def test_requires_cache(self):
        engine = MagicMock()
        engine.cache = None
        with pytest.raises(ValueError):
            PrecomputeModule(engine, population=list)

    def test_batch_size_positive(self):
        with pytest.raises(ValueError):
            PrecomputeModule(_mock_engine(), population=list, batch_size=0)


class TestRunCycle:
    def test_batches_wrap_around(self):
        module = PrecomputeModule(_mock_engine(), population=lambda: ["a", "b", "c", "d", "e"],
                                  batch_size=2)

        assert module.run_cycle().succeeded == ["a", "b"]
        assert module.run_cycle().succeeded == ["c", "d"]
        third = module.run_cycle()
        assert third.succeeded == ["e", "a"]
        assert third.next_position == 1
        assert module.position == 1

    def test_batch_larger_than_population(self):
        module = PrecomputeModule(_mock_engine(), population=lambda: ["a", "b"], batch_size=5)
        result = module.run_cycle()
        assert result.succeeded == ["a", "b"]
        assert result.next_position == 0

    def test_failure_isolated(self, caplog):
        module = PrecomputeModule(_mock_engine(fail_for={"b"}), population=lambda: ["a", "b", "c"])

        with caplog.at_level("ERROR"):
            result = module.run_cycle()

        assert result.succeeded == ["a", "c"]
        assert result.failed == ["b"]
        assert result.processed == 3
        assert not result.success
        assert "cannot compute b" in caplog.text

    def test_empty_population(self):
        result = PrecomputeModule(_mock_engine(), population=list).run_cycle()
        assert result.processed == 0
        assert result.success
        assert result.finished_at is not None


class TestRunAll:
    def test_whole_population_position_untouched(self):
        module = PrecomputeModule(_mock_engine(), population=lambda: ["a", "b", "c"], batch_size=1)
        module.run_cycle()
        result = module.run_all()
        assert result.succeeded == ["a", "b", "c"]
        assert module.position == 1

    def test_given_subjects(self):
        module = PrecomputeModule(_mock_engine(), population=lambda: ["a", "b", "c"])
        assert module.run_all(["c"]).succeeded == ["c"]


class TestWithFriendsEngine:
    def test_cycle_fills_cache(self, people_graph):
        cache = InMemoryCacheStore()
        engine = build_friends_engine(people_graph, cache=cache, seed=42)
        module = PrecomputeModule(engine, population=people_graph.persons, batch_size=10)

        result = module.run_cycle()

        assert result.success
        assert len(cache) == len(people_graph)
        vince = people_graph.get("Vince")
        assert [r.item.name for r in engine.recommend(vince, Mode.PRECOMPUTED, 2)] == \
            ["Adam", "Luanne"]
