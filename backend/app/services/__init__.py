"""Services Layer — orchestration of validation, store, cache, and read events."""
