"""Shared fixtures for unit tests"""

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from docsnav.crud.database import make_engine


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine with all tables created, shared by every session."""
    engine = make_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
