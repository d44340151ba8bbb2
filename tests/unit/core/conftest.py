"""Shared fixtures for core unit tests"""

import pytest
from sqlmodel import Session

from docsnav.config import Settings
from docsnav.core.content import ContentManager
from docsnav.core.models import Actor, Navigation
from docsnav.crud.projects import create_project, set_member_role


SAMPLE_ROUTES = [
    {"title": "Guides", "path": "/docs/guides", "children": [
        {"title": "Intro", "path": "/docs/guides/intro"},
        {"title": "Setup", "path": "/docs/guides/setup"},
    ]},
    {"title": "Reference", "path": "/docs/reference", "children": [
        {"title": "API", "path": "/docs/reference/api"},
    ]},
]


@pytest.fixture(name="settings")
def settings_fixture():
    return Settings()


@pytest.fixture(name="manager")
def manager_fixture(engine, settings):
    return ContentManager(engine, settings)


@pytest.fixture(name="project")
def project_fixture(engine):
    """Committed project with an editor and a viewer member."""
    with Session(engine) as session:
        project = create_project(session, "Acme Docs", "acme")
        set_member_role(session, project.id, "editor-1", "editor")
        set_member_role(session, project.id, "viewer-1", "viewer")
        session.commit()
        session.refresh(project)
        return project


@pytest.fixture(name="project_id")
def project_id_fixture(project):
    return project.id


@pytest.fixture(name="editor")
def editor_fixture():
    return Actor(id="editor-1")


@pytest.fixture(name="viewer")
def viewer_fixture():
    return Actor(id="viewer-1")


@pytest.fixture(name="sample_nav")
def sample_nav_fixture():
    return Navigation.model_validate({"title": "Documentation", "version": "1.0", "routes": SAMPLE_ROUTES})


@pytest.fixture(name="seeded")
def seeded_fixture(manager, project_id, editor, sample_nav):
    """Project with the sample tree stored and a document for every leaf."""
    for slug, title in [("guides/intro", "Intro"), ("guides/setup", "Setup"), ("reference/api", "API")]:
        assert manager.save_document(project_id, slug, {"title": title}, editor)
    assert manager.update_navigation(project_id, sample_nav, editor)
    return project_id
