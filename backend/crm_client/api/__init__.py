"""API Layer — dashboard gateway routes and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - Routes never retry or classify: ApiClient owns all resilience logic
"""
