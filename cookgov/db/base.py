"""SQLAlchemy Declarative Base — shared base class for all ORM models.

Invariants:
    - All models inherit from Base
    - Base is the single source of truth for table metadata
"""

import uuid

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all cookgov ORM models."""
    pass


def new_id() -> str:
    """String UUID primary key, portable across PostgreSQL and SQLite."""
    return str(uuid.uuid4())
