"""
Exclusion rules of the friend-recommendation domain.
"""

from __future__ import annotations

from reco_engine.graph.people import PeopleGraph, Person


class ExistingFriends:
    """Never recommend someone the subject is already friends with."""

    def __init__(self, graph: PeopleGraph) -> None:
        self.graph = graph

    def build(self, subject: Person) -> set[Person]:
        return self.graph.friends_of(subject)


class ExcludeSelf:
    """Never recommend the subject to themselves."""

    def include(self, subject: Person, item: Person) -> bool:
        return item != subject
