"""
Names mapping between persistent object properties and database columns.

A ``NamesRecord`` belongs to exactly one persistent class. It holds:

- property -> column and the exact inverse column -> property
- foreign key property paths -> column (``owner.id`` also registers ``owner``)
- column -> conversion type, used to coerce values going into and coming out
  of the database
- the identifier property (``"id"`` until set)

Reads take no lock. Every mutation builds new dicts under a lock and swaps
them in, so a concurrent reader sees either the old tables or the new ones.
"""

import logging
import threading
from typing import Optional

from genericdao.base import DEFAULT_ID_PROPERTY
from genericdao.errors import InconsistentMappingError, InvalidArgumentError

logger = logging.getLogger(__name__)


class NamesRecord:
    """
    Stores the names mapping from persistent entity properties to database
    column names, plus foreign key and type conversion metadata.

    Example:
        >>> names = NamesRecord()
        >>> names.set_name_mapping("id", "ID")
        >>> names.set_name_mapping("email", "EMAIL_ADDR", str)
        >>> names.get_property_for_column("email_addr")
        'email'
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._property_to_column: dict[str, str] = {}
        self._column_to_property: dict[str, str] = {}
        self._foreign_key_property_to_column: dict[str, str] = {}
        self._column_to_type: dict[str, type] = {}
        self._id_property: str = DEFAULT_ID_PROPERTY

    # ── Name mappings ─────────────────────────────────────────────

    def set_name_mapping(self, property_name: str, column: str, conversion_type: Optional[type] = None) -> None:
        """Store a mapping from property to column.

        Args:
            property_name: the property from a persistent object
            column: the db table column which maps to the property
            conversion_type: optional type to convert values of this column into
                on their way into the DB (and back out again)

        Raises:
            InvalidArgumentError: if the property or column is empty
            InconsistentMappingError: if the property or the column is already
                mapped to something else; nothing is changed in that case
        """
        if not property_name or not column:
            raise InvalidArgumentError("property and column must not be empty")

        with self._lock:
            property_to_column = dict(self._property_to_column)
            column_to_property = dict(self._column_to_property)
            previous_column = property_to_column.get(property_name)
            previous_property = column_to_property.get(column)

            property_to_column[property_name] = column
            column_to_property[column] = property_name
            if (
                len(property_to_column) != len(column_to_property)
                or previous_column not in (None, column)
                or previous_property not in (None, property_name)
            ):
                logger.warning(
                    "Rejected mapping %s -> %s (property currently maps to %s, column currently maps to %s)",
                    property_name,
                    column,
                    previous_column,
                    previous_property,
                )
                raise InconsistentMappingError(property_name, column)

            self._property_to_column = property_to_column
            self._column_to_property = column_to_property
            if conversion_type is not None:
                column_to_type = dict(self._column_to_type)
                column_to_type[column] = conversion_type
                self._column_to_type = column_to_type
        logger.debug("Mapped property %s to column %s", property_name, column)

    @property
    def id_property(self) -> str:
        """The identifier property, ``"id"`` unless set otherwise."""
        return self._id_property

    def get_id_property(self) -> str:
        return self._id_property

    def set_identifier_property(self, property_name: str) -> None:
        """Set the unique identifier property for the class.

        The property must already be mapped, so add the id mapping first.
        """
        if property_name not in self._property_to_column:
            raise InvalidArgumentError(
                f"this property ({property_name}) is not one of the mappings, "
                "the identifier must be an existing mapping so add the id property mapping first"
            )
        self._id_property = property_name

    # ── Foreign keys ──────────────────────────────────────────────

    def set_foreign_key_mapping(self, property_name: str, column: str) -> None:
        """Register a foreign key property.

        Args:
            property_name: normally a path like ``"thing.id"`` where ``thing`` is the
                referencing property and ``id`` the identifier of the referenced type;
                the prefix before the first dot is registered as well
            column: the db table column holding the foreign key, which must already
                be mapped
        """
        if not property_name or not column:
            raise InvalidArgumentError("property and column must not be empty")
        if column not in self._column_to_property:
            raise InvalidArgumentError(
                f"this column ({column}) is not one of the mappings, "
                "a foreign key column must be an existing mapping so add the column mapping first"
            )

        with self._lock:
            foreign_keys = dict(self._foreign_key_property_to_column)
            foreign_keys[property_name] = column
            if "." in property_name:
                prefix = property_name.split(".", 1)[0]
                foreign_keys[prefix] = column
            self._foreign_key_property_to_column = foreign_keys
        logger.debug("Mapped foreign key property %s to column %s", property_name, column)

    def is_foreign_key_property(self, property_name: str) -> bool:
        return property_name in self._foreign_key_property_to_column

    # ── Lookups ───────────────────────────────────────────────────

    def get_property_for_column(self, column: str) -> Optional[str]:
        """Property which maps to this db column, or None if not found.

        Tries the exact name, then lowercase, then uppercase, then a case
        insensitive scan of every mapped column.
        """
        if not column:
            return None
        column_to_property = self._column_to_property
        name = column_to_property.get(column)
        if name is None:
            name = column_to_property.get(column.lower())
        if name is None:
            name = column_to_property.get(column.upper())
        if name is None:
            lowered = column.lower()
            for key, value in column_to_property.items():
                if key.lower() == lowered:
                    name = value
                    break
        return name

    def get_column_for_property(self, property_name: str) -> Optional[str]:
        """Column which maps to this property, or None if not found.

        Foreign key mappings take precedence over plain mappings.
        """
        name = self._foreign_key_property_to_column.get(property_name)
        if name is None:
            name = self._property_to_column.get(property_name)
        return name

    # ── Conversion types ──────────────────────────────────────────

    def get_type_for_property(self, property_name: str) -> Optional[type]:
        """Conversion type for the column of this property, None if no conversion is needed."""
        if not property_name:
            return None
        column = self.get_column_for_property(property_name)
        if column is None:
            return None
        return self._column_to_type.get(column)

    def get_type_for_column(self, column: str) -> Optional[type]:
        if not column:
            return None
        return self._column_to_type.get(column)

    def set_type_for_property(self, property_name: str, conversion_type: Optional[type]) -> None:
        """Set (or clear with None) the conversion type for the column of a mapped property."""
        if not property_name:
            raise InvalidArgumentError("property must be set")
        column = self.get_column_for_property(property_name)
        if column is None:
            raise InvalidArgumentError(f"No column found to match this property: {property_name}")
        self.set_type_for_column(column, conversion_type)

    def set_type_for_column(self, column: str, conversion_type: Optional[type]) -> None:
        """Set (or clear with None) the conversion type for a column."""
        if not column:
            raise InvalidArgumentError("column must be set")
        with self._lock:
            column_to_type = dict(self._column_to_type)
            if conversion_type is None:
                column_to_type.pop(column, None)
            else:
                column_to_type[column] = conversion_type
            self._column_to_type = column_to_type

    # ── Name listings (sorted) ────────────────────────────────────

    def get_property_names(self) -> list[str]:
        return sorted(self._property_to_column)

    def get_column_names(self) -> list[str]:
        return sorted(self._column_to_property)

    def get_foreign_key_property_names(self) -> list[str]:
        """Foreign key properties without a dot (prefixes and simple names)."""
        return sorted(name for name in self._foreign_key_property_to_column if "." not in name)

    def get_foreign_key_column_names(self) -> list[str]:
        """Columns of the foreign key properties without a dot."""
        foreign_keys = self._foreign_key_property_to_column
        return sorted({column for name, column in foreign_keys.items() if "." not in name})

    def __contains__(self, property_name) -> bool:
        return property_name in self._property_to_column

    def __len__(self) -> int:
        return len(self._property_to_column)

    def __repr__(self) -> str:
        return f"NamesRecord(id_property={self._id_property!r}, mappings={self._property_to_column!r})"
