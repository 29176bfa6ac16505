"""
Tests for the engine and session factory.

The singleton engine is reset around every test so the DATABASE_URL set by
`monkeypatch` is picked up.
"""

import pytest
from sqlmodel import SQLModel

from genericdao import storage_factory
from genericdao.storage_factory import (
    DEFAULT_DATABASE_URL,
    close_engine,
    dao_scope,
    get_database_url,
    get_engine,
    session_scope,
)
from tests.models import Person


@pytest.fixture
def file_database(monkeypatch, tmp_path):
    """Point DATABASE_URL at a temporary SQLite file with the test tables."""
    close_engine()
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'factory.db'}")
    SQLModel.metadata.create_all(get_engine())
    yield
    close_engine()


def test_default_database_url(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    assert get_database_url() == DEFAULT_DATABASE_URL


def test_empty_database_url_is_rejected(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "")
    with pytest.raises(ValueError):
        get_database_url()


def test_engine_is_singleton(file_database):
    assert get_engine() is get_engine()


def test_echo_from_environment(monkeypatch, tmp_path):
    close_engine()
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'echo.db'}")
    monkeypatch.setenv("GENERICDAO_SQL_ECHO", "true")
    try:
        assert get_engine().echo is True
    finally:
        close_engine()


def test_close_engine_resets_singleton(file_database):
    engine = get_engine()
    close_engine()
    assert storage_factory._engine is None
    assert get_engine() is not engine


def test_close_engine_rereads_database_url(file_database, monkeypatch, tmp_path):
    get_engine()
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'other.db'}")
    assert get_engine().url.database.endswith("factory.db")

    close_engine()
    assert get_engine().url.database.endswith("other.db")


def test_session_scope_commits(file_database):
    with session_scope() as session:
        session.add(Person(email="committed@example.com"))

    with dao_scope([Person]) as dao:
        assert dao.count_all(Person) == 1


def test_session_scope_rolls_back(file_database):
    with pytest.raises(RuntimeError):
        with dao_scope([Person]) as dao:
            dao.create(Person(email="rolled-back@example.com"))
            raise RuntimeError("boom")

    with dao_scope([Person]) as dao:
        assert dao.count_all(Person) == 0
