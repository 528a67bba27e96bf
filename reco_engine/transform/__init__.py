"""
Score transformers: rescale raw metrics onto bounded partial scores.

Modules
-------
base   : ScoreTransformer protocol, NoTransformation, round_half_up().
pareto : ParetoScoreTransformer — 80/20 diminishing-returns curve.
"""
