"""
Shared constants and the search model used by the generic DAO.

A ``Search`` is a backend-neutral description of a query against one
persistent class: a list of restrictions on properties, a list of orderings
and a paging window. Property names are object-model names; the DAO
translates them into columns through the entity's ``NamesRecord``.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

# Identifier property assumed for an entity until one is set explicitly
DEFAULT_ID_PROPERTY = "id"


# ============================================================================
# Comparisons
# ============================================================================


class Comparison(str, Enum):
    """How a restriction compares a property with its value."""

    EQUALS = "eq"
    NOT_EQUALS = "ne"
    GREATER = "gt"
    GREATER_OR_EQUALS = "ge"
    LESS = "lt"
    LESS_OR_EQUALS = "le"
    LIKE = "like"
    NULL = "null"
    NOT_NULL = "not_null"


# ============================================================================
# Search model
# ============================================================================


class Restriction(BaseModel):
    """
    A single condition on a property.

    For ``EQUALS`` and ``NOT_EQUALS`` a list, tuple or set value is treated as
    a membership test (``IN`` / ``NOT IN``). ``NULL`` and ``NOT_NULL`` ignore
    the value.
    """

    property: str = Field(..., min_length=1, description="Property name (may be a foreign key path like 'owner.id')")
    value: Any = Field(None, description="Value to compare against")
    comparison: Comparison = Field(Comparison.EQUALS, description="Comparison to apply")


class Order(BaseModel):
    """Sort on a property."""

    property: str = Field(..., min_length=1, description="Property name to sort on")
    ascending: bool = Field(True, description="Sort ascending when true, descending otherwise")


class Search(BaseModel):
    """
    A query against one persistent class.

    Example:
        >>> search = Search().add_restriction("email", "%@example.com", Comparison.LIKE).add_order("email")
        >>> search.limit = 10
    """

    restrictions: list[Restriction] = Field(default_factory=list)
    orders: list[Order] = Field(default_factory=list)
    start: int = Field(0, ge=0, description="Number of results to skip")
    limit: int = Field(0, ge=0, description="Maximum number of results, 0 for no limit")
    conjunction: bool = Field(True, description="Combine restrictions with AND when true, OR when false")

    def add_restriction(self, property_name: str, value: Any = None, comparison: Comparison = Comparison.EQUALS) -> "Search":
        """Append a restriction and return this search for chaining."""
        self.restrictions.append(Restriction(property=property_name, value=value, comparison=comparison))
        return self

    def add_order(self, property_name: str, ascending: bool = True) -> "Search":
        """Append an ordering and return this search for chaining."""
        self.orders.append(Order(property=property_name, ascending=ascending))
        return self

    def is_empty(self) -> bool:
        """True if the search neither restricts, orders nor pages."""
        return not self.restrictions and not self.orders and self.start == 0 and self.limit == 0
