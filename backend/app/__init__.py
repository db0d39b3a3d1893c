"""User Items Application Package — users, the items they own, and a cached read path.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
