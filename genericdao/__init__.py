"""
Generic DAO on top of SQLModel/SQLAlchemy.

Reusable CRUD and search operations for any persistent class, plus the
``NamesRecord`` mapping between object properties and database columns.
"""

from .base import DEFAULT_ID_PROPERTY, Comparison, Order, Restriction, Search
from .errors import InconsistentMappingError, InvalidArgumentError
from .mapper import DataMapper, convert_value
from .names_record import NamesRecord

__all__ = [
    "DEFAULT_ID_PROPERTY",
    "Comparison",
    "Order",
    "Restriction",
    "Search",
    "InvalidArgumentError",
    "InconsistentMappingError",
    "DataMapper",
    "convert_value",
    "NamesRecord",
]
