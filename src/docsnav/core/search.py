"""Search adapter: section titles from the tree, then ranked document matches"""

from uuid import UUID

from docsnav.core.content import ContentManager
from docsnav.core.models import SearchResult
from docsnav.core.utils.slug import path_to_slug, section_label


class SearchAdapter:

    def __init__(self, manager: ContentManager):
        self.manager = manager

    def search(self, project_id: UUID, query: str | None) -> list[SearchResult]:
        """Matching sections first (with child counts), then documents in store rank order."""
        if not query or not query.strip():
            return []
        term = query.strip()
        needle = term.lower()

        results = [
            SearchResult(
                kind="section",
                title=route.title,
                slug=route.slug or path_to_slug(route.path),
                child_count=len(route.children or []),
            )
            for route in self.manager.get_navigation(project_id).routes
            if needle in route.title.lower()
        ]
        results += [
            SearchResult(
                kind="document",
                title=doc.title,
                slug=doc.slug,
                description=doc.description,
                section=section_label(doc.slug),
            )
            for doc in self.manager.search_documents(project_id, term)
        ]
        return results
