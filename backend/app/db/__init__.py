"""Database Metadata — SQLAlchemy Base shared by models and migrations.

Design Decisions:
    - asyncpg driver for PostgreSQL, aiosqlite for local tests
"""
