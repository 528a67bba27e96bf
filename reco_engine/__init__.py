"""
reco-engine — a pluggable recommendation engine.

Scoring units contribute named partial scores for candidates of a subject
into a thread-safe aggregator; the engine ranks the merged result.  Rankings
are computed on request (real-time mode) or served from a cache filled by a
background precompute scheduler (precomputed mode).

Packages
--------
result     : Score, Recommendation, Recommendations (aggregator).
transform  : Score transformers (Pareto curve).
engine     : Context, unit protocols, delegating and top-level engines, registry.
cache, db, models : Precomputed-ranking stores and their SQLite persistence.
precompute : Batched background precomputation.
reporting  : Report lines and JSON reports.
graph, friends : Friend-recommendation domain over an in-memory people graph.
"""

__version__ = "0.1.0"
