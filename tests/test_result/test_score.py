"""
Tests for reco_engine/result/score.py and result/recommendation.py.

What we test
------------
Score:
  - Starts empty with total 0.
  - add() on an existing name increments, never overwrites.
  - total always equals the sum of partials (incl. negatives).
  - add() rejects empty / non-string names and non-int values.
  - add_score() sums by name; None is rejected.
  - str() renders total first, partials sorted by name.
  - copy() is independent.

Recommendation:
  - str() renders "(item {score})".
"""

from __future__ import annotations

import pytest

from reco_engine.result.recommendation import Recommendation
from reco_engine.result.score import Score


class TestScore:
    def test_starts_empty(self):
        score = Score()
        assert score.total == 0
        assert len(score) == 0
        assert str(score) == "{total:0}"

    def test_add_same_name_increments(self):
        score = Score()
        score.add("friendsInCommon", 15)
        score.add("friendsInCommon", 5)
        assert score.get("friendsInCommon") == 20
        assert score.total == 20

    def test_total_is_sum_of_partials(self):
        score = Score()
        score.add("a", 15)
        score.add("b", 10)
        score.add("c", -6)
        assert score.total == 19
        assert score.total == score.recompute_total()
        assert score.get_total_score() == 19

    def test_unknown_partial_is_zero(self):
        assert Score().get("missing") == 0

    @pytest.mark.parametrize("name", ["", None, 5])
    def test_invalid_name_rejected(self, name):
        with pytest.raises(ValueError):
            Score().add(name, 1)

    @pytest.mark.parametrize("value", [1.5, 2.0, "3", None, True])
    def test_non_int_value_rejected(self, value):
        score = Score()
        with pytest.raises(ValueError):
            score.add("a", value)
        assert score.total == 0
        assert len(score) == 0

    def test_add_score_sums_by_name(self):
        a = Score({"x": 1, "y": 2})
        b = Score({"y": 3, "z": -4})
        a.add_score(b)
        assert a.as_dict() == {"x": 1, "y": 5, "z": -4}
        assert a.total == 2
        assert b.as_dict() == {"y": 3, "z": -4}

    def test_add_score_none_rejected(self):
        with pytest.raises(ValueError):
            Score().add_score(None)

    def test_str_sorted_by_name(self):
        score = Score()
        score.add("sameGender", 10)
        score.add("friendsInCommon", 15)
        score.add("ageDifference", -6)
        assert str(score) == "{total:19,ageDifference:-6,friendsInCommon:15,sameGender:10}"

    def test_copy_is_independent(self):
        original = Score({"a": 1})
        clone = original.copy()
        clone.add("a", 1)
        assert original.get("a") == 1
        assert clone.get("a") == 2
        assert original != clone

    def test_equality_by_partials(self):
        assert Score({"a": 1, "b": 2}) == Score({"b": 2, "a": 1})


class TestRecommendation:
    def test_str(self):
        rec = Recommendation("Luanne")
        rec.add("friendsInCommon", 15)
        rec.add("ageDifference", -7)
        assert str(rec) == "(Luanne {total:8,ageDifference:-7,friendsInCommon:15})"
        assert rec.total == 8
