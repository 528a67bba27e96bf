"""
Background precomputation feeding ``Mode.PRECOMPUTED``.

Modules
-------
module : PrecomputeModule, PrecomputeCycleResult — batched sweeps of the
         subject population into the cache.
"""
