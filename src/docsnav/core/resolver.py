"""Slug resolution: decide whether a docs URL denotes a document, a section, or nothing"""

import logging
from typing import Sequence
from uuid import UUID

from docsnav.core.content import ContentManager
from docsnav.core.models import Resolution, ResolutionKind
from docsnav.core.tree import NavTree


logger = logging.getLogger(__name__)


def join_segments(segments: Sequence[str] | str) -> str:
    """Join URL path segments into a slug, ignoring empty segments and stray slashes."""
    if isinstance(segments, str):
        segments = segments.split('/')
    return '/'.join(s.strip('/') for s in segments if s and s.strip('/'))


class SlugResolver:
    """Resolves path segments against a project's documents and navigation.

    Precedence, first match wins:
      1. a nested slug ('section/page') with a published document -> document
      2. a top-level slug: a document plus a matching section -> section with
         overview; a document alone -> document; a section alone -> section
         without overview (children synthesized from the tree)
      3. anything else -> not found
    A section never shadows a nested document of the same name.
    """

    def __init__(self, manager: ContentManager):
        self.manager = manager

    def resolve(self, project_id: UUID, segments: Sequence[str] | str) -> Resolution:
        slug = join_segments(segments)
        if not slug:
            return Resolution(kind=ResolutionKind.not_found)

        doc = self.manager.get_document(project_id, slug)
        if '/' in slug:
            if doc is not None:
                return Resolution(kind=ResolutionKind.document, slug=slug, document=doc)
            return Resolution(kind=ResolutionKind.not_found, slug=slug)

        tree = NavTree.from_navigation(self.manager.get_navigation(project_id))
        section = tree.match_section(slug)
        if doc is not None and section is not None:
            return Resolution(
                kind=ResolutionKind.section_with_overview,
                slug=slug,
                document=doc,
                section=section,
                children=tree.child_refs(section),
            )
        if doc is not None:
            return Resolution(kind=ResolutionKind.document, slug=slug, document=doc)
        if section is not None:
            return Resolution(
                kind=ResolutionKind.section_without_overview,
                slug=slug,
                section=section,
                children=tree.child_refs(section),
            )

        logger.debug("Nothing at %s in project %s", slug, project_id)
        return Resolution(kind=ResolutionKind.not_found, slug=slug)
