"""
Global fixtures for the test suite.

Fixtures:
- `engine`: a fresh in-memory SQLite engine with every test table created.
  `StaticPool` keeps the single in-memory database alive across connections.
- `session`: a SQLModel session on that engine, closed after the test.
- `dao`: a `SQLModelGenericDao` handling `Person`, `Owner` and `Thing`.
- `names`: an empty `NamesRecord`.

Run all tests with:
    pytest -v
"""

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from genericdao.names_record import NamesRecord
from genericdao.storage.backends.sqlmodel_dao import SQLModelGenericDao
from tests.models import Owner, Person, Thing


@pytest.fixture
def engine():
    """In-memory SQLite engine with all test tables."""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def dao(session):
    return SQLModelGenericDao(session, [Person, Owner, Thing])


@pytest.fixture
def names():
    """Fresh names record for each test."""
    return NamesRecord()
