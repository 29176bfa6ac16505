"""
Data mappers: the per-class link between persistent objects and table columns.

This module bridges the gap between:
- Persistent objects (SQLModel table classes) - property names and Python values
- Column data (raw rows) - column names and storage values

Each ``DataMapper`` owns the ``NamesRecord`` of exactly one persistent class.
Mappers are created explicitly and handed to the DAO, there is no global
registry of them.
"""

import logging
from collections.abc import Mapping
from enum import Enum
from functools import lru_cache
from types import UnionType
from typing import Any, Optional, Union, get_args, get_origin

from pydantic import TypeAdapter
from sqlalchemy import inspect
from sqlalchemy.orm import MANYTOONE

from genericdao.errors import InvalidArgumentError
from genericdao.names_record import NamesRecord

logger = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def _adapter(target_type) -> TypeAdapter:
    return TypeAdapter(target_type)


def convert_value(value: Any, target_type: Optional[type]) -> Any:
    """
    Coerce a value into ``target_type``.

    None values and a None target pass through unchanged. ``str`` targets use
    ``str()`` (an enum gives its value); everything else is validated by pydantic in lax mode, so
    ``"42"`` becomes ``42`` for ``int`` and an ISO string becomes a ``datetime``.

    Raises:
        pydantic.ValidationError: if the value cannot be converted
    """
    if value is None or target_type is None:
        return value
    if isinstance(target_type, type) and type(value) is target_type:
        return value
    if target_type is str:
        return value.value if isinstance(value, Enum) else str(value)
    return _adapter(target_type).validate_python(value)


def _unwrap_optional(annotation):
    """Optional[X] -> X, anything else unchanged."""
    if get_origin(annotation) in (Union, UnionType):
        non_none = [a for a in get_args(annotation) if a is not type(None)]
        if len(non_none) == 1:
            return non_none[0]
    return annotation


class DataMapper:
    """
    Mapping record for one persistent class.

    Attributes:
        persistent_class: the SQLModel (or other SQLAlchemy mapped) class
        names_record: property <-> column names and conversion types
        table_name: the table storing the class

    Example:
        >>> mapper = DataMapper.from_model(Thing, column_types={"quantity": str})
        >>> mapper.names_record.get_column_for_property("owner.id")
        'OWNER_REF'
    """

    def __init__(self, persistent_class: type, names_record: Optional[NamesRecord] = None, table_name: Optional[str] = None):
        if persistent_class is None:
            raise InvalidArgumentError("persistent class must be set")
        self.persistent_class = persistent_class
        self.names_record = names_record if names_record is not None else NamesRecord()
        self.table_name = table_name or getattr(persistent_class, "__tablename__", None) or persistent_class.__name__.lower()

    @classmethod
    def from_model(cls, model: type, column_types: Optional[dict[str, type]] = None) -> "DataMapper":
        """
        Generate the default names record for a mapped class by reflection.

        - every column attribute maps its attribute name to its column name
        - a single-column primary key becomes the identifier property
        - a many-to-one relationship ``owner`` over column ``OWNER_ID`` registers
          the foreign key path ``owner.<remote id property>`` (and so ``owner``)
        - a column attribute carrying a ``ForeignKey`` is a foreign key property

        Args:
            model: a SQLModel table class
            column_types: optional property -> conversion type overrides
        """
        orm_mapper = inspect(model)
        names = NamesRecord()

        for attr in orm_mapper.column_attrs:
            names.set_name_mapping(attr.key, attr.columns[0].name)

        if len(orm_mapper.primary_key) == 1:
            names.set_identifier_property(orm_mapper.get_property_by_column(orm_mapper.primary_key[0]).key)

        for rel in orm_mapper.relationships:
            if rel.direction is not MANYTOONE:
                continue
            for local, remote in rel.local_remote_pairs:
                remote_property = rel.mapper.get_property_by_column(remote).key
                names.set_foreign_key_mapping(f"{rel.key}.{remote_property}", local.name)

        for attr in orm_mapper.column_attrs:
            column = attr.columns[0]
            if column.foreign_keys:
                names.set_foreign_key_mapping(attr.key, column.name)

        for property_name, conversion_type in (column_types or {}).items():
            names.set_type_for_property(property_name, conversion_type)

        logger.debug("Generated names record for %s: %r", model.__name__, names)
        return cls(model, names, orm_mapper.local_table.name)

    # ── Table access ──────────────────────────────────────────────

    @property
    def table(self):
        """The SQLAlchemy ``Table`` of the persistent class."""
        return inspect(self.persistent_class).local_table

    @property
    def id_property(self) -> str:
        return self.names_record.get_id_property()

    def column_for(self, property_name: str):
        """
        Table column for a property name (foreign key paths included).

        Raises:
            InvalidArgumentError: if the property has no mapped column
        """
        column_name = self.names_record.get_column_for_property(property_name)
        if column_name is None:
            raise InvalidArgumentError(f"No column found to match property '{property_name}' on {self.persistent_class.__name__}")
        return self.column_named(column_name)

    def column_named(self, column_name: str):
        for column in self.table.columns:
            if column.name == column_name:
                return column
        raise InvalidArgumentError(f"Column '{column_name}' is not part of table '{self.table.name}'")

    def mapped_columns(self) -> list:
        """Table columns of every mapped column name, in column name order."""
        return [self.column_named(name) for name in self.names_record.get_column_names()]

    def field_type(self, property_name: str) -> Optional[type]:
        """Annotated Python type of a property on the persistent class, if known."""
        fields = getattr(self.persistent_class, "model_fields", {})
        field = fields.get(property_name)
        if field is None:
            return None
        return _unwrap_optional(field.annotation)

    def _columns_by_property(self) -> dict[str, str]:
        names = self.names_record
        return {names.get_property_for_column(column): column for column in names.get_column_names()}

    # ── Conversion ────────────────────────────────────────────────

    def to_storage_value(self, property_name: str, value: Any) -> Any:
        """Convert a property value with the conversion type of its column."""
        if isinstance(value, (list, tuple, set, frozenset)):
            return [self.to_storage_value(property_name, v) for v in value]
        return convert_value(value, self.names_record.get_type_for_property(property_name))

    def to_column_data(self, obj) -> dict[str, Any]:
        """
        Convert a persistent object into column-keyed storage data.

        Example:
            >>> mapper.to_column_data(Person(id=1, email="a@b.c"))
            {'EMAIL_ADDR': 'a@b.c', 'ID': 1}
        """
        if not isinstance(obj, self.persistent_class):
            raise InvalidArgumentError(f"Expected {self.persistent_class.__name__}, got {type(obj).__name__}")
        names = self.names_record
        data = {}
        for property_name, column in self._columns_by_property().items():
            data[column] = convert_value(getattr(obj, property_name, None), names.get_type_for_column(column))
        return data

    def to_property_data(self, row: Mapping[str, Any]) -> dict[str, Any]:
        """
        Convert column-keyed data (a raw row) into property-keyed data.

        Column names are matched case-insensitively. Columns with a conversion
        type are converted back into the annotated type of their property.
        Columns that map to no property are skipped.
        """
        names = self.names_record
        columns = self._columns_by_property()
        data = {}
        for column, value in row.items():
            property_name = names.get_property_for_column(column)
            if property_name is None:
                logger.debug("Skipping unmapped column %s for %s", column, self.persistent_class.__name__)
                continue
            if names.get_type_for_column(columns[property_name]) is not None:
                value = convert_value(value, self.field_type(property_name))
            data[property_name] = value
        return data

    def to_domain(self, row: Mapping[str, Any]):
        """Build a persistent object from column-keyed data."""
        return self.persistent_class(**self.to_property_data(row))

    def __repr__(self) -> str:
        return f"DataMapper({self.persistent_class.__name__}, table={self.table_name!r})"
