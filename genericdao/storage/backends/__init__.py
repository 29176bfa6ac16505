"""
Storage backend implementations.

Available Backends:

- **sqlmodel_dao**: SQLModel/SQLAlchemy session based DAO, works with any
  database SQLAlchemy supports (SQLite for tests, PostgreSQL in production)
"""

__all__ = [
    "sqlmodel_dao",
]
