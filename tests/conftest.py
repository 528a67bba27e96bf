"""
Shared pytest fixtures for the reco-engine test suite.

Provides:
  - ``in_memory_db``: a fresh in-memory SQLite connection with the cache
    schema applied.
  - ``people_graph``: the six-person reference graph used by the friend
    recommendation scenarios.
  - ``remembering_logger`` + ``friends_engine``: the friend-recommendation
    engine wired with default config and a remembering reporter.
"""

from __future__ import annotations

import sqlite3
from typing import Generator

import pytest

from reco_engine.db.schema import apply_schema
from reco_engine.friends.engine import build_friends_engine
from reco_engine.graph.people import PeopleGraph, Person, build_graph
from reco_engine.reporting.reporter import RememberingRecommendationLogger


# ── Database fixture ──────────────────────────────────────────────────────────

@pytest.fixture
def in_memory_db() -> Generator[sqlite3.Connection, None, None]:
    """Yield a fresh in-memory SQLite connection with the schema applied."""
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    apply_schema(conn)
    yield conn
    conn.close()


# ── Friend-recommendation domain ──────────────────────────────────────────────

REFERENCE_PEOPLE = [
    Person("Michal", 30, "MALE", "London"),
    Person("Daniela", 20, "FEMALE", "London"),
    Person("Vince", 40, "MALE", "London"),
    Person("Adam", 30, "MALE"),
    Person("Luanne", 25, "FEMALE", "Mumbai"),
    Person("Bob", 60, "MALE"),
]

REFERENCE_FRIENDSHIPS = [
    ("Michal", "Daniela"),
    ("Michal", "Luanne"),
    ("Michal", "Adam"),
    ("Michal", "Vince"),
    ("Daniela", "Vince"),
    ("Bob", "Vince"),
]


@pytest.fixture
def people_graph() -> PeopleGraph:
    return build_graph(REFERENCE_PEOPLE, REFERENCE_FRIENDSHIPS)


@pytest.fixture
def remembering_logger() -> RememberingRecommendationLogger:
    return RememberingRecommendationLogger()


@pytest.fixture
def friends_engine(people_graph, remembering_logger):
    """Sequential friend-recommendation engine with default config."""
    return build_friends_engine(people_graph, reporter=remembering_logger, seed=42)
