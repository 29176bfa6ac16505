"""
Database setup script for generic DAO persistent classes.

This script:
1. Imports the given modules so their SQLModel table classes register with SQLModel.metadata
2. Optionally drops the existing tables
3. Creates all tables
4. Prints the names mapping generated for every registered persistent class

Usage:
    python -m genericdao.setup_database --database-url sqlite:///app.db --models myapp.models
"""

import argparse
import importlib
import logging
from typing import Optional

from sqlalchemy import create_engine
from sqlmodel import SQLModel

from genericdao.mapper import DataMapper
from genericdao.storage_factory import get_database_url


def import_models(module_names: list[str]) -> list[type]:
    """Import modules and return the SQLModel table classes they define."""
    models = []
    for module_name in module_names:
        module = importlib.import_module(module_name)
        for value in vars(module).values():
            if isinstance(value, type) and issubclass(value, SQLModel) and getattr(value, "__table__", None) is not None:
                if value.__module__ == module.__name__ and value not in models:
                    models.append(value)
    return models


def describe_mappings(models: list[type]) -> list[DataMapper]:
    """Print the generated names mapping of each persistent class."""
    mappers = []
    for model in models:
        mapper = DataMapper.from_model(model)
        names = mapper.names_record
        print(f"{model.__name__} -> {mapper.table_name} (id: {names.get_id_property()})")
        for column in names.get_column_names():
            print(f"  {names.get_property_for_column(column)} -> {column}")
        for property_name in names.get_foreign_key_property_names():
            print(f"  foreign key {property_name} -> {names.get_column_for_property(property_name)}")
        mappers.append(mapper)
    return mappers


def setup_database(database_url: str, module_names: Optional[list[str]] = None, drop_first: bool = False):
    """Complete database setup."""
    print(f"Setting up database: {database_url}")

    # 1. Register the persistent classes
    models = import_models(module_names or [])
    print(f"✓ Loaded {len(models)} persistent classes")

    engine = create_engine(database_url, echo=False)

    # 2. Drop tables
    if drop_first:
        print("Dropping tables...")
        SQLModel.metadata.drop_all(engine)
        print("✓ Tables dropped")

    # 3. Create all tables from SQLModel definitions
    print("Creating tables...")
    SQLModel.metadata.create_all(engine)
    print("✓ Tables created")

    # 4. Show the mappings the generic DAO will use
    describe_mappings(models)

    engine.dispose()
    print("\n✅ Database setup complete!")
    return models


def main():
    parser = argparse.ArgumentParser(description="Create tables for generic DAO persistent classes")
    parser.add_argument("--database-url", default=None, help="Database URL (defaults to the DATABASE_URL environment variable)")
    parser.add_argument("--models", nargs="*", default=[], help="Modules defining SQLModel table classes (e.g., myapp.models)")
    parser.add_argument("--drop-first", action="store_true", help="Drop existing tables before creating them")
    parser.add_argument("--verbose", action="store_true", help="Log debug output, including generated mappings")

    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
    setup_database(args.database_url or get_database_url(), args.models, drop_first=args.drop_first)


if __name__ == "__main__":
    main()
