"""
Recommendation engines.

Modules
-------
context    : RecommendationContext, Mode, DispatchStats — per-pass state.
base       : ScoringUnit / PostProcessor / Blacklist / Filter protocols and
             BaseScoringUnit.
delegating : DelegatingEngine — dispatches units (sequential or parallel)
             into one aggregator; rank().
top_level  : RecommendationEngine — exclusions, post-processing, reporting
             and the precomputed/real-time modes.
registry   : register_unit / build_units — unit selection by name.
"""
