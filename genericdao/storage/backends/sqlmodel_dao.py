"""
SQLModel implementation of the generic DAO interfaces.

Works on any SQLModel table class registered with it. Queries are built with
SQLAlchemy and executed on the caller's session; property names from a
``Search`` are turned into table columns through each class's
``NamesRecord``. Writes are flushed but never committed, transaction
boundaries belong to the caller (see ``genericdao.storage_factory``).
"""

import logging
from collections.abc import Iterable
from typing import Any, Optional, Union

from sqlalchemy import and_, delete, func, or_
from sqlalchemy import select as sa_select
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from genericdao.base import Comparison, Restriction, Search
from genericdao.errors import InvalidArgumentError
from genericdao.mapper import DataMapper
from genericdao.storage.interfaces import ColumnDataDaoInterface, GeneralGenericDaoInterface

logger = logging.getLogger(__name__)

_COLLECTION_TYPES = (list, tuple, set, frozenset)


class SQLModelGenericDao(GeneralGenericDaoInterface, ColumnDataDaoInterface):
    """
    Generic DAO over a SQLModel session.

    Usage:
        with session_scope() as session:
            dao = SQLModelGenericDao(session, [Owner, Thing])
            owner = dao.create(Owner(name="alice"))
            things = dao.find_by_search(Thing, Search().add_restriction("owner.id", owner.id))
    """

    def __init__(self, session: Session, models: Iterable[Union[type, DataMapper]]):
        self.session = session
        self._mappers: dict[type, DataMapper] = {}
        for model in models:
            mapper = model if isinstance(model, DataMapper) else DataMapper.from_model(model)
            self._mappers[mapper.persistent_class] = mapper

    # ── Registry access ───────────────────────────────────────────

    @property
    def persistent_classes(self) -> list[type]:
        return list(self._mappers)

    def get_data_mapper(self, model: type) -> DataMapper:
        mapper = self._mappers.get(model)
        if mapper is None:
            name = getattr(model, "__name__", repr(model))
            raise InvalidArgumentError(f"{name} is not a persistent class handled by this DAO")
        return mapper

    def get_id_property(self, model: type) -> str:
        return self.get_data_mapper(model).id_property

    def _mapper_for(self, obj: Any) -> DataMapper:
        if obj is None:
            raise InvalidArgumentError("object must not be None")
        return self.get_data_mapper(type(obj))

    def _flush(self) -> None:
        try:
            self.session.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to flush session: %s", e)
            raise

    # ── Single objects ────────────────────────────────────────────

    def find_by_id(self, model: type, id: Any) -> Optional[Any]:
        self.get_data_mapper(model)
        if id is None:
            raise InvalidArgumentError("id must be set")
        return self.session.get(model, id)

    def create(self, obj: Any) -> Any:
        mapper = self._mapper_for(obj)
        id_value = getattr(obj, mapper.id_property, None)
        if id_value is not None and self.session.get(mapper.persistent_class, id_value) is not None:
            raise InvalidArgumentError(f"Cannot create {type(obj).__name__} with id {id_value}, it already exists")
        self.session.add(obj)
        self._flush()
        logger.debug("Created %s %s", type(obj).__name__, getattr(obj, mapper.id_property, None))
        return obj

    def update(self, obj: Any) -> Any:
        mapper = self._mapper_for(obj)
        id_value = getattr(obj, mapper.id_property, None)
        if id_value is None:
            raise InvalidArgumentError(f"Cannot update {type(obj).__name__} without an id ({mapper.id_property})")
        if self.session.get(mapper.persistent_class, id_value) is None:
            raise InvalidArgumentError(f"Cannot update {type(obj).__name__} {id_value}, it does not exist")
        merged = self.session.merge(obj)
        self._flush()
        logger.debug("Updated %s %s", type(obj).__name__, getattr(merged, mapper.id_property))
        return merged

    def save(self, obj: Any) -> Any:
        mapper = self._mapper_for(obj)
        id_value = getattr(obj, mapper.id_property, None)
        if id_value is None or self.session.get(mapper.persistent_class, id_value) is None:
            return self.create(obj)
        return self.update(obj)

    def delete(self, obj: Any) -> None:
        self._delete(obj)
        self._flush()

    def _delete(self, obj: Any) -> None:
        mapper = self._mapper_for(obj)
        id_value = getattr(obj, mapper.id_property, None)
        if id_value is None:
            raise InvalidArgumentError(f"Cannot delete {type(obj).__name__} without an id ({mapper.id_property})")
        persistent = self.session.get(mapper.persistent_class, id_value)
        if persistent is None:
            raise InvalidArgumentError(f"Cannot delete {type(obj).__name__} {id_value}, it does not exist")
        self.session.delete(persistent)
        logger.debug("Deleted %s %s", type(obj).__name__, id_value)

    def delete_by_id(self, model: type, id: Any) -> bool:
        obj = self.find_by_id(model, id)
        if obj is None:
            return False
        self.session.delete(obj)
        self._flush()
        return True

    # ── Listing and searching ─────────────────────────────────────

    def find_all(self, model: type, start: int = 0, limit: int = 0) -> list[Any]:
        return self.find_by_search(model, Search(start=start, limit=limit))

    def count_all(self, model: type) -> int:
        return self.count_by_search(model, Search())

    def find_by_search(self, model: type, search: Search) -> list[Any]:
        mapper = self.get_data_mapper(model)
        statement = self._apply_search(select(model), mapper, search)
        return list(self.session.exec(statement).all())

    def find_one_by_search(self, model: type, search: Search) -> Optional[Any]:
        if search is None:
            raise InvalidArgumentError("search must not be None")
        results = self.find_by_search(model, search.model_copy(update={"limit": 1}))
        return results[0] if results else None

    def count_by_search(self, model: type, search: Search) -> int:
        mapper = self.get_data_mapper(model)
        statement = self._apply_restrictions(select(func.count()).select_from(mapper.table), mapper, search)
        return self.session.exec(statement).one()

    def _apply_search(self, statement, mapper: DataMapper, search: Search):
        statement = self._apply_restrictions(statement, mapper, search)
        for order in search.orders:
            column = mapper.column_for(order.property)
            statement = statement.order_by(column.asc() if order.ascending else column.desc())
        if search.start:
            statement = statement.offset(search.start)
        if search.limit:
            statement = statement.limit(search.limit)
        return statement

    def _apply_restrictions(self, statement, mapper: DataMapper, search: Search):
        if search is None:
            raise InvalidArgumentError("search must not be None")
        conditions = [self._condition(mapper, restriction) for restriction in search.restrictions]
        if conditions:
            statement = statement.where(and_(*conditions) if search.conjunction else or_(*conditions))
        return statement

    def _condition(self, mapper: DataMapper, restriction: Restriction):
        """Build the SQL condition for one restriction."""
        column = mapper.column_for(restriction.property)
        comparison = restriction.comparison
        if comparison is Comparison.NULL:
            return column.is_(None)
        if comparison is Comparison.NOT_NULL:
            return column.is_not(None)

        is_collection = isinstance(restriction.value, _COLLECTION_TYPES)
        value = mapper.to_storage_value(restriction.property, restriction.value)
        if comparison is Comparison.EQUALS:
            if is_collection:
                return column.in_(value)
            return column.is_(None) if value is None else column == value
        if comparison is Comparison.NOT_EQUALS:
            if is_collection:
                return column.not_in(value)
            return column.is_not(None) if value is None else column != value

        if value is None or is_collection:
            raise InvalidArgumentError(f"{comparison.name} restriction on '{restriction.property}' needs a single value")
        if comparison is Comparison.GREATER:
            return column > value
        if comparison is Comparison.GREATER_OR_EQUALS:
            return column >= value
        if comparison is Comparison.LESS:
            return column < value
        if comparison is Comparison.LESS_OR_EQUALS:
            return column <= value
        if comparison is Comparison.LIKE:
            return column.like(value)
        raise InvalidArgumentError(f"Unsupported comparison: {comparison}")

    # ── Batches ───────────────────────────────────────────────────

    def save_set(self, objects: Iterable[Any]) -> None:
        objects = list(objects)
        for obj in objects:
            self._mapper_for(obj)
        for obj in objects:
            self.save(obj)

    def delete_set(self, objects: Iterable[Any]) -> None:
        objects = list(objects)
        for obj in objects:
            self._mapper_for(obj)
        for obj in objects:
            self._delete(obj)
        self._flush()

    def delete_by_ids(self, model: type, ids: Iterable[Any]) -> int:
        mapper = self.get_data_mapper(model)
        ids = list(ids)
        if not ids:
            return 0
        id_attribute = getattr(model, mapper.id_property)
        try:
            result = self.session.execute(delete(model).where(id_attribute.in_(ids)))
        except SQLAlchemyError as e:
            logger.error("Failed to delete %s by ids: %s", model.__name__, e)
            raise
        logger.debug("Deleted %d %s rows by id", result.rowcount, model.__name__)
        return result.rowcount

    # ── Column data ───────────────────────────────────────────────

    def fetch_column_data(self, model: type, search: Optional[Search] = None) -> list[dict[str, Any]]:
        mapper = self.get_data_mapper(model)
        statement = self._apply_search(sa_select(*mapper.mapped_columns()), mapper, search or Search())
        rows = self.session.execute(statement).mappings().all()
        return [mapper.to_property_data(row) for row in rows]

    def to_column_data(self, obj: Any) -> dict[str, Any]:
        return self._mapper_for(obj).to_column_data(obj)
