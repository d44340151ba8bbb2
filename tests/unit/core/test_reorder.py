"""Unit tests for core/reorder.py"""

import pytest

from docsnav.config import Settings
from docsnav.core.content import ContentManager
from docsnav.core.models import Actor, Outcome
from docsnav.core.reorder import ReorderHandler
from docsnav.core.tree import NavTree


@pytest.fixture(name="handler")
def handler_fixture(manager):
    return ReorderHandler(manager)


def _payload(manager, project_id, edit=None):
    """Current tree as a reorder payload, optionally edited through a NavTree."""
    nav = manager.get_navigation(project_id)
    if edit:
        tree = NavTree.from_navigation(nav)
        edit(tree)
        nav.routes = tree.to_routes()
    structure = nav.structure()
    structure["revision"] = nav.revision
    return {"structure": structure}


# --- outcomes ---

def test_outcome_status_codes():
    assert Outcome.ok.status_code == 200
    assert Outcome.bad_request.status_code == 400
    assert Outcome.unauthorized.status_code == 401
    assert Outcome.forbidden.status_code == 403
    assert Outcome.not_found.status_code == 404
    assert Outcome.conflict.status_code == 409
    assert Outcome.internal_error.status_code == 500


# --- reorder ---

def test_reorder_persists_proposed_tree(handler, manager, seeded, editor):
    payload = _payload(manager, seeded, lambda t: t.move_section("/docs/reference", "/docs/guides"))
    result = handler.reorder("acme", payload, editor)
    assert result.ok
    assert [r.path for r in manager.get_navigation(seeded).routes] == ["/docs/reference", "/docs/guides"]


def test_reorder_cross_section_move(handler, manager, seeded, editor):
    """Dropping a document on the first child of another section makes it that section's first child."""
    payload = _payload(manager, seeded, lambda t: t.move_document("/docs/reference/api", "/docs/guides/intro"))
    assert handler.reorder("acme", payload, editor).ok
    nav = manager.get_navigation(seeded)
    assert [c.path for c in nav.routes[0].children] == [
        "/docs/reference/api", "/docs/guides/intro", "/docs/guides/setup",
    ]
    assert nav.routes[1].children == []


def test_reorder_without_actor(handler, manager, seeded):
    result = handler.reorder("acme", _payload(manager, seeded), None)
    assert result.outcome == Outcome.unauthorized


@pytest.mark.parametrize("payload", [
    None,
    {},
    {"structure": "routes"},
    {"structure": {"title": "Docs"}},
    {"structure": {"routes": {"a": 1}}},
    {"structure": {"routes": [{"path": "/docs/untitled"}]}},
])
def test_reorder_invalid_payload(handler, seeded, editor, payload):
    result = handler.reorder("acme", payload, editor)
    assert result.outcome == Outcome.bad_request
    assert result.error.startswith("Invalid navigation structure")


def test_reorder_duplicate_paths(handler, seeded, editor):
    payload = {"structure": {"routes": [
        {"title": "A", "path": "/docs/a"},
        {"title": "A again", "path": "/docs/a"},
    ]}}
    assert handler.reorder("acme", payload, editor).outcome == Outcome.bad_request


def test_reorder_unknown_project(handler, manager, seeded, editor):
    result = handler.reorder("nope", _payload(manager, seeded), editor)
    assert result.outcome == Outcome.not_found
    assert result.error == "Project not found"


def test_reorder_viewer_forbidden(handler, manager, seeded, viewer):
    result = handler.reorder("acme", _payload(manager, seeded), viewer)
    assert result.outcome == Outcome.forbidden
    assert result.error == "Forbidden"


def test_reorder_global_admin(handler, manager, seeded):
    admin = Actor(id="root", role="super_admin")
    assert handler.reorder("acme", _payload(manager, seeded), admin).ok


def test_reorder_stale_revision_conflicts(engine, seeded, editor):
    """With the reject policy a payload built on an old revision is refused."""
    manager = ContentManager(engine, Settings(conflict_policy="reject"))
    handler = ReorderHandler(manager)
    stale = _payload(manager, seeded)
    assert handler.reorder("acme", _payload(manager, seeded), editor).ok
    result = handler.reorder("acme", stale, editor)
    assert result.outcome == Outcome.conflict
    assert result.outcome.status_code == 409


# --- rename_section ---

def test_rename_section(handler, manager, seeded, editor):
    assert manager.save_document(seeded, "guides", {"title": "Guides"}, editor)
    result = handler.rename_section("acme", "guides", {"title": " Tutorials "}, editor)
    assert result.ok
    assert result.section.title == "Tutorials"
    assert manager.get_navigation(seeded).routes[0].title == "Tutorials"
    assert manager.get_document(seeded, "guides").title == "Tutorials"


@pytest.mark.parametrize("payload", [{}, {"title": ""}, {"title": 5}, None])
def test_rename_section_requires_title(handler, seeded, editor, payload):
    result = handler.rename_section("acme", "guides", payload, editor)
    assert result.outcome == Outcome.bad_request
    assert result.error == "Title is required"


def test_rename_section_missing_section(handler, seeded, editor):
    result = handler.rename_section("acme", "nowhere", {"title": "X"}, editor)
    assert result.outcome == Outcome.not_found
    assert result.error == "Section not found"


def test_rename_section_missing_navigation(handler, project_id, editor):
    result = handler.rename_section("acme", "guides", {"title": "X"}, editor)
    assert result.outcome == Outcome.not_found
    assert result.error == "Navigation not found"


def test_rename_section_unauthorized_and_forbidden(handler, seeded, viewer):
    assert handler.rename_section("acme", "guides", {"title": "X"}, None).outcome == Outcome.unauthorized
    assert handler.rename_section("acme", "guides", {"title": "X"}, viewer).outcome == Outcome.forbidden
