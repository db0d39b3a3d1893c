"""Core Layer — pure domain logic: types, errors, keys, tags, validation, boundary protocols.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - All functions are pure and deterministic
"""
