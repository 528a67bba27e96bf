"""
Result model for one scoring pass.

Modules
-------
score           : Score — named integer partial scores plus running total.
recommendation  : Recommendation — one item bound to its Score.
recommendations : Recommendations — thread-safe aggregator with ranking,
                  truncation and merge.
"""
