"""
Linear pool pricing a main token against a wrapped token, where the wrapped
token's rate is composed from two wrappers around one rebasing underlying.

- `linear_pool.core`: pure functional core (fixed point, rate composition,
  target band, invariant math, engine).
- `linear_pool.integration`: imperative shell (pool object, rate sources,
  logging).
"""
