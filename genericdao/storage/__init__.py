"""
Storage layer for the generic DAO.

Key Components:

- **interfaces**: Abstract base classes defining the DAO contracts
- **backends**: Concrete implementations (SQLModel)

Example:

    >>> from genericdao.storage.backends.sqlmodel_dao import SQLModelGenericDao
    >>> dao = SQLModelGenericDao(session, [Owner, Thing])
    >>> dao.find_all(Thing, limit=10)
"""

__all__ = [
    "interfaces",
    "backends",
]
