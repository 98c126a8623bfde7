"""CRM Dashboard Client Package — resilient API access for the sales/support dashboard.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
