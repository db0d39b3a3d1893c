"""Root conftest — shared test configuration."""

import os

# Ensure tests never reach real infrastructure
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///:memory:",
)
os.environ.pop("REDIS_URL", None)
os.environ.pop("KAFKA_BROKERS", None)
