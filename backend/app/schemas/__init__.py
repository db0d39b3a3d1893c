"""Pydantic Schemas — operation parameters, result rows, and API responses.

Invariants:
    - Schemas validate at system boundaries (input, cache payloads, API responses)

Design Decisions:
    - Separate from models: schemas are contracts, models are persistence
"""
