"""Shared fixtures: a throwaway SQLite database with the products schema."""

import os
import tempfile

import pytest
from indexbench.db.database import create_schema, make_engine, session_factory


@pytest.fixture
def temp_db_path():
    """Create a temporary database file for testing."""
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    yield path
    # Cleanup
    if os.path.exists(path):
        os.remove(path)


@pytest.fixture
def database_url(temp_db_path):
    return f"sqlite:///{temp_db_path}"


@pytest.fixture
def engine(database_url):
    engine = make_engine(database_url)
    create_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = session_factory(engine)()
    yield session
    session.close()
