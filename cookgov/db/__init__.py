"""Database Primitives — declarative Base, id generation and column types.

Invariants:
    - All timestamps are stored and returned as timezone-aware UTC
    - Primary keys are string UUIDs generated on the Python side

Design Decisions:
    - asyncpg driver for PostgreSQL in production, aiosqlite in tests
"""
