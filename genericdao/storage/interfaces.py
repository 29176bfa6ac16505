"""
Storage interfaces for the generic DAO.

These ABC interfaces describe reusable CRUD and search operations over any
registered persistent class, so that no per-entity DAO has to be written:
- GenericDaoInterface: lookups by id and single object writes
- GeneralGenericDaoInterface: listing, searching, counting and batch writes
- ColumnDataDaoInterface: column-level access through the names mapping

The SQLModel implementation lives in ``genericdao.storage.backends``.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from genericdao.base import Search
    from genericdao.mapper import DataMapper


class GenericDaoInterface(ABC):
    """Basic operations on single persistent objects."""

    @property
    @abstractmethod
    def persistent_classes(self) -> list[type]:
        """All persistent classes this DAO handles."""
        pass

    @abstractmethod
    def get_id_property(self, model: type) -> str:
        """Name of the identifier property of a persistent class."""
        pass

    @abstractmethod
    def find_by_id(self, model: type, id: Any) -> Optional[Any]:
        """Get an object by its identifier, None if there is none."""
        pass

    @abstractmethod
    def create(self, obj: Any) -> Any:
        """Persist a new object and return it with its identifier set."""
        pass

    @abstractmethod
    def update(self, obj: Any) -> Any:
        """Persist changes to an object which already has an identifier and a stored row."""
        pass

    @abstractmethod
    def save(self, obj: Any) -> Any:
        """Create or update an object depending on whether it has an identifier."""
        pass

    @abstractmethod
    def delete(self, obj: Any) -> None:
        """Remove a persistent object."""
        pass

    @abstractmethod
    def delete_by_id(self, model: type, id: Any) -> bool:
        """Remove the object with this identifier, False if there was none."""
        pass


class GeneralGenericDaoInterface(GenericDaoInterface):
    """Listing, searching and batch operations."""

    @abstractmethod
    def find_all(self, model: type, start: int = 0, limit: int = 0) -> list[Any]:
        """List all objects of a class, optionally paged (limit 0 means all)."""
        pass

    @abstractmethod
    def count_all(self, model: type) -> int:
        """Total number of objects of a class."""
        pass

    @abstractmethod
    def find_by_search(self, model: type, search: "Search") -> list[Any]:
        """Find objects matching a search."""
        pass

    @abstractmethod
    def find_one_by_search(self, model: type, search: "Search") -> Optional[Any]:
        """First object matching a search, None if nothing matches."""
        pass

    @abstractmethod
    def count_by_search(self, model: type, search: "Search") -> int:
        """Number of objects matching a search (paging is ignored)."""
        pass

    @abstractmethod
    def save_set(self, objects: Iterable[Any]) -> None:
        """Create or update a batch of objects, possibly of mixed classes."""
        pass

    @abstractmethod
    def delete_set(self, objects: Iterable[Any]) -> None:
        """Remove a batch of objects, possibly of mixed classes."""
        pass

    @abstractmethod
    def delete_by_ids(self, model: type, ids: Iterable[Any]) -> int:
        """Remove all objects of a class with these identifiers, returning how many were removed."""
        pass


class ColumnDataDaoInterface(ABC):
    """Column level access that goes through each class's names record."""

    @abstractmethod
    def get_data_mapper(self, model: type) -> "DataMapper":
        """The data mapper registered for a persistent class."""
        pass

    @abstractmethod
    def fetch_column_data(self, model: type, search: Optional["Search"] = None) -> list[dict[str, Any]]:
        """Select raw column data and return it keyed by property name, converted."""
        pass

    @abstractmethod
    def to_column_data(self, obj: Any) -> dict[str, Any]:
        """Column-keyed storage data for a persistent object."""
        pass
