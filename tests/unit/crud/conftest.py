"""Shared fixtures for crud unit tests"""

import pytest
from sqlmodel import Session

from docsnav.crud.projects import create_project


@pytest.fixture(name="session")
def session_fixture(engine):
    """Fresh session per test; changes are not committed."""
    with Session(engine) as s:
        yield s


@pytest.fixture(name="project")
def project_fixture(session):
    """A persisted project to scope documents and navigation."""
    return create_project(session, "Acme Docs", "acme")
