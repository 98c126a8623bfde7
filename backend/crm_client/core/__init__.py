"""Core Layer — pure domain logic: types, error taxonomy, retry math, fixtures.

Invariants:
    - No module in core/ imports from infrastructure/ or api/
    - No network IO, no sleeping; clocks are injected where time matters
"""
