"""Unit tests for core/resolver.py"""

import pytest

from docsnav.core.models import NavRoute, Navigation, ResolutionKind
from docsnav.core.resolver import SlugResolver, join_segments


@pytest.fixture(name="resolver")
def resolver_fixture(manager):
    return SlugResolver(manager)


@pytest.mark.parametrize("segments,expected", [
    (["guides", "intro"], "guides/intro"),
    ("guides/intro/", "guides/intro"),
    (["", "/guides/", "intro"], "guides/intro"),
    ([], ""),
])
def test_join_segments(segments, expected):
    assert join_segments(segments) == expected


def test_section_without_overview_then_with(manager, resolver, project_id, editor):
    """A section gains its overview as soon as a document is saved at its slug."""
    nav = Navigation(routes=[NavRoute(title="Guides", path="/docs/guides", children=[
        NavRoute(title="Intro", path="/docs/guides/intro"),
    ])])
    assert manager.update_navigation(project_id, nav, editor)

    result = resolver.resolve(project_id, ["guides"])
    assert result.kind == ResolutionKind.section_without_overview
    assert result.document is None
    assert [(c.title, c.slug) for c in result.children] == [("Intro", "guides/intro")]

    assert manager.save_document(project_id, "guides", {"title": "Guides overview"}, editor)
    result = resolver.resolve(project_id, ["guides"])
    assert result.kind == ResolutionKind.section_with_overview
    assert result.document.title == "Guides overview"
    assert result.section.path == "/docs/guides"
    assert len(result.children) == 1


def test_nested_document(resolver, seeded):
    result = resolver.resolve(seeded, ["guides", "intro"])
    assert result.kind == ResolutionKind.document
    assert result.document.slug == "guides/intro"


def test_nested_missing(resolver, seeded):
    assert resolver.resolve(seeded, "guides/missing").kind == ResolutionKind.not_found


def test_top_level_document_without_section(manager, resolver, seeded, editor):
    assert manager.save_document(seeded, "changelog", {"title": "Changelog"}, editor)
    result = resolver.resolve(seeded, "changelog")
    assert result.kind == ResolutionKind.document
    assert result.children == []


def test_section_matched_by_title(manager, resolver, project_id, editor):
    nav = Navigation(routes=[NavRoute(title="Getting Started", path="/start", children=[])])
    assert manager.update_navigation(project_id, nav, editor)
    result = resolver.resolve(project_id, "getting-started")
    assert result.kind == ResolutionKind.section_without_overview
    assert result.children == []


def test_section_does_not_shadow_nested_document(manager, resolver, seeded, editor):
    """'reference/guides' is a document even though 'guides' is a section."""
    assert manager.save_document(seeded, "reference/guides", {"title": "Guides reference"}, editor)
    result = resolver.resolve(seeded, ["reference", "guides"])
    assert result.kind == ResolutionKind.document
    assert result.document.title == "Guides reference"


def test_unpublished_document_not_resolved(manager, resolver, seeded, editor):
    assert manager.save_document(seeded, "guides/draft", {"title": "Draft", "published": False}, editor)
    assert resolver.resolve(seeded, "guides/draft").kind == ResolutionKind.not_found


def test_nothing(resolver, seeded):
    assert resolver.resolve(seeded, "unknown").kind == ResolutionKind.not_found
    assert resolver.resolve(seeded, []).kind == ResolutionKind.not_found
