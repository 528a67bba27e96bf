"""
Tests for reco_engine/graph/people.py.

What we test
------------
Person:
  - str() is the name; invalid records raise ValueError.
PeopleGraph:
  - Friendships are undirected; self-friendship rejected.
  - Unknown people raise KeyError.
  - persons() ordered by name.
  - from_dict() / from_json() load the JSON layout; missing file raises
    FileNotFoundError.
"""

from __future__ import annotations

import json

import pytest

from reco_engine.graph.people import PeopleGraph, Person


class TestPerson:
    def test_str_is_name(self):
        assert str(Person("Adam", 30, "MALE")) == "Adam"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"name": "", "age": 30, "gender": "MALE"},
            {"name": "X", "age": -1, "gender": "MALE"},
            {"name": "X", "age": 30, "gender": "unknown"},
        ],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            Person(**kwargs)


class TestPeopleGraph:
    def test_friendship_is_undirected(self, people_graph):
        assert people_graph.are_friends("Bob", "Vince")
        assert people_graph.are_friends("Vince", "Bob")
        assert people_graph.get("Bob") in people_graph.friends_of("Vince")

    def test_self_friendship_rejected(self, people_graph):
        with pytest.raises(ValueError):
            people_graph.add_friendship("Adam", "Adam")

    def test_unknown_person(self, people_graph):
        with pytest.raises(KeyError):
            people_graph.get("Nobody")
        with pytest.raises(KeyError):
            people_graph.add_friendship("Adam", "Nobody")
        with pytest.raises(KeyError):
            people_graph.friends_of("Nobody")

    def test_persons_ordered(self, people_graph):
        assert [p.name for p in people_graph.persons()] == [
            "Adam", "Bob", "Daniela", "Luanne", "Michal", "Vince",
        ]
        assert len(people_graph) == 6
        assert "Adam" in people_graph

    def test_friends_of_is_snapshot(self, people_graph):
        friends = people_graph.friends_of("Adam")
        people_graph.add_friendship("Adam", "Bob")
        assert {p.name for p in friends} == {"Michal"}
        assert {p.name for p in people_graph.friends_of("Adam")} == {"Michal", "Bob"}


class TestLoading:
    def test_from_dict(self):
        graph = PeopleGraph.from_dict({
            "people": [
                {"name": "A", "age": 20, "gender": "female", "city": "Oslo"},
                {"name": "B", "age": 21, "gender": "MALE"},
            ],
            "friendships": [["A", "B"]],
        })
        assert graph.get("A") == Person("A", 20, "FEMALE", "Oslo")
        assert graph.get("B").city is None
        assert graph.are_friends("A", "B")

    def test_friendship_with_unknown_person(self):
        with pytest.raises(KeyError):
            PeopleGraph.from_dict({"people": [], "friendships": [["A", "B"]]})

    def test_from_json(self, tmp_path):
        path = tmp_path / "people.json"
        path.write_text(json.dumps({
            "people": [{"name": "A", "age": 1, "gender": "MALE"}], "friendships": [],
        }))
        assert len(PeopleGraph.from_json(path)) == 1

    def test_from_json_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            PeopleGraph.from_json(tmp_path / "missing.json")
