"""Infrastructure Layer — store, cache, publisher, and observability adapters.

Invariants:
    - Infrastructure never decides policy; it maps backend failures to core/errors.py types
    - Every backend is reached through a core/repository_protocols.py contract
"""
