"""
Candidate source for the friend-recommendation domain.

Modules
-------
people : Person, PeopleGraph — thread-safe social graph loadable from JSON.
"""
