"""
In-memory social graph: people, their home cities and undirected friendships.

The graph is the candidate source of the friend-recommendation domain.  It is
safe to read from scoring units running in parallel threads while another
thread adds people or friendships; every accessor returns a snapshot.

JSON layout (``config/people.json``)::

    {
      "people": [{"name": "Michal", "age": 30, "gender": "MALE", "city": "London"}, ...],
      "friendships": [["Michal", "Daniela"], ...]
    }
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Optional, Union

logger = logging.getLogger(__name__)

VALID_GENDERS: frozenset[str] = frozenset({"MALE", "FEMALE"})


@dataclass(frozen=True)
class Person:
    """A member of the social graph, identified by name."""

    name: str
    age: int
    gender: str
    city: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Person name must not be empty.")
        if self.age < 0:
            raise ValueError(f"Age must be >= 0, got {self.age} for {self.name}.")
        if self.gender not in VALID_GENDERS:
            raise ValueError(
                f"Gender must be one of {sorted(VALID_GENDERS)}, got '{self.gender}'."
            )

    def __str__(self) -> str:
        return self.name


PersonRef = Union[Person, str]


class PeopleGraph:
    """Thread-safe graph of ``Person`` nodes with undirected friendship edges."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._people: dict[str, Person] = {}
        self._friends: dict[str, set[str]] = {}

    # ── Mutation ──────────────────────────────────────────────────────────────

    def add_person(self, person: Person) -> Person:
        """Add ``person`` (or replace the record with the same name)."""
        with self._lock:
            self._people[person.name] = person
            self._friends.setdefault(person.name, set())
        return person

    def add_friendship(self, a: PersonRef, b: PersonRef) -> None:
        """Connect ``a`` and ``b`` in both directions.

        Raises:
            KeyError:   If either person is not in the graph.
            ValueError: If ``a`` and ``b`` are the same person.
        """
        with self._lock:
            name_a, name_b = self._name_of(a), self._name_of(b)
            if name_a == name_b:
                raise ValueError(f"{name_a} cannot befriend themselves.")
            self._friends[name_a].add(name_b)
            self._friends[name_b].add(name_a)

    # ── Queries ───────────────────────────────────────────────────────────────

    def get(self, name: str) -> Person:
        """Return the person called ``name``.

        Raises:
            KeyError: If nobody with that name is in the graph.
        """
        with self._lock:
            try:
                return self._people[name]
            except KeyError:
                raise KeyError(f"Unknown person '{name}'.") from None

    def friends_of(self, person: PersonRef) -> set[Person]:
        with self._lock:
            name = self._name_of(person)
            return {self._people[f] for f in self._friends[name]}

    def are_friends(self, a: PersonRef, b: PersonRef) -> bool:
        with self._lock:
            return self._name_of(b) in self._friends[self._name_of(a)]

    def persons(self) -> list[Person]:
        """Everybody in the graph, ordered by name."""
        with self._lock:
            return [self._people[n] for n in sorted(self._people)]

    def __len__(self) -> int:
        with self._lock:
            return len(self._people)

    def __contains__(self, person: object) -> bool:
        name = person.name if isinstance(person, Person) else person
        with self._lock:
            return name in self._people

    def _name_of(self, person: PersonRef) -> str:
        name = person.name if isinstance(person, Person) else person
        if name not in self._people:
            raise KeyError(f"Unknown person '{name}'.")
        return name

    # ── Loading ───────────────────────────────────────────────────────────────

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PeopleGraph":
        """Build a graph from ``{"people": [...], "friendships": [[a, b], ...]}``.

        Raises:
            KeyError:   If a friendship names an unknown person.
            ValueError: If a person record is invalid.
        """
        graph = cls()
        for record in data.get("people", []):
            graph.add_person(
                Person(
                    name=record["name"],
                    age=int(record["age"]),
                    gender=str(record["gender"]).upper(),
                    city=record.get("city"),
                )
            )
        for pair in data.get("friendships", []):
            if len(pair) != 2:
                raise ValueError(f"Friendship must name exactly two people, got {pair!r}.")
            graph.add_friendship(pair[0], pair[1])
        return graph

    @classmethod
    def from_json(cls, path: Path) -> "PeopleGraph":
        """Load a graph from a JSON file.

        Raises:
            FileNotFoundError: If ``path`` does not exist.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"People graph file not found: {path}")
        graph = cls.from_dict(json.loads(path.read_text(encoding="utf-8")))
        logger.info("Loaded people graph from %s: %d people", path, len(graph))
        return graph


def build_graph(people: Iterable[Person], friendships: Iterable[tuple[str, str]]) -> PeopleGraph:
    graph = PeopleGraph()
    for person in people:
        graph.add_person(person)
    for a, b in friendships:
        graph.add_friendship(a, b)
    return graph
