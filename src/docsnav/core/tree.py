"""Navigation tree aggregate: decoding stored structures and command-style mutations.

Every mutation works on a private deep copy of the routes, so a NavTree can be
built from a caller's Navigation, edited, validated, and only then persisted
as one full-structure replace.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Optional

from pydantic import ValidationError

from docsnav.core.errors import NotFound, ValidationFailure
from docsnav.core.models import ChildRef, NavRoute, Navigation
from docsnav.core.utils.slug import doc_path, path_to_slug, slugify


logger = logging.getLogger(__name__)

_MAX_DECODE_PASSES = 3


@dataclass
class DecodedStructure:
    """A stored navigation structure after normalization, plus what had to be fixed."""
    title: str
    version: str
    routes: list[NavRoute]
    issues: list[str] = field(default_factory=list)


def _clean_node(obj: Any, where: str, issues: list[str]) -> Optional[NavRoute]:
    """Validate one node on its own fields; malformed children are dropped, never their parent."""
    if not isinstance(obj, dict):
        issues.append(f"malformed node at {where}")
        return None
    try:
        node = NavRoute.model_validate({k: v for k, v in obj.items() if k != 'children'})
    except ValidationError as e:
        issues.append(f"malformed node at {where}: {e.error_count()} error(s)")
        return None
    children = obj.get('children')
    if isinstance(children, list):
        cleaned = (_clean_node(c, f"{node.path}[{i}]", issues) for i, c in enumerate(children))
        node.children = [c for c in cleaned if c is not None]
    elif children is not None:
        issues.append(f"children of {node.path} is not a list")
    return node


def decode_structure(raw: Any, default_title: str = "Documentation", default_version: str = "1.0") -> DecodedStructure:
    """Normalize a stored navigation structure; never raises and routes is never None."""
    issues: list[str] = []
    data = raw
    if data is None:
        issues.append("structure is missing")

    passes = 0
    while isinstance(data, str) and passes < _MAX_DECODE_PASSES:
        passes += 1
        try:
            data = json.loads(data)
            issues.append("structure is double-encoded")
        except json.JSONDecodeError:
            issues.append("structure is an undecodable string")
            data = None

    if data is not None and not isinstance(data, dict):
        issues.append("structure is not an object")
    if not isinstance(data, dict):
        data = {}

    raw_routes = data.get('routes')
    if raw_routes is None:
        if raw is not None:
            issues.append("routes array is missing")
        raw_routes = []
    elif not isinstance(raw_routes, list):
        issues.append("routes is not an array")
        raw_routes = []

    cleaned = (_clean_node(obj, f"routes[{i}]", issues) for i, obj in enumerate(raw_routes))
    routes = [node for node in cleaned if node is not None]

    title = data.get('title')
    version = data.get('version')
    return DecodedStructure(
        title=title if isinstance(title, str) and title else default_title,
        version=str(version) if isinstance(version, (str, int, float)) and version != "" else default_version,
        routes=routes,
        issues=issues,
    )


def _array_move(items: list, old_index: int, new_index: int) -> None:
    items.insert(new_index, items.pop(old_index))


class NavTree:
    """In-process aggregate over a project's ordered routes."""

    def __init__(self, routes: Iterable[NavRoute] = ()):
        self.routes: list[NavRoute] = [r.model_copy(deep=True) for r in routes]

    @classmethod
    def from_navigation(cls, navigation: Navigation) -> "NavTree":
        return cls(navigation.routes)

    # --- queries ---

    def walk(self) -> Iterator[tuple[NavRoute, Optional[NavRoute], int]]:
        """Yield (node, parent, sibling_index) depth-first in display order."""
        def _walk(siblings: list[NavRoute], parent: Optional[NavRoute]):
            for i, node in enumerate(siblings):
                yield node, parent, i
                if node.children:
                    yield from _walk(node.children, node)

        yield from _walk(self.routes, None)

    def paths(self) -> list[str]:
        return [node.path for node, _, _ in self.walk()]

    def find(self, path: str) -> Optional[NavRoute]:
        for node, _, _ in self.walk():
            if node.path == path:
                return node
        return None

    def parent_of(self, path: str) -> Optional[NavRoute]:
        for node, parent, _ in self.walk():
            if node.path == path:
                return parent
        return None

    def _siblings_of(self, path: str) -> tuple[list[NavRoute], int]:
        """The list holding path and its index there. Raises NotFound."""
        for node, parent, i in self.walk():
            if node.path == path:
                return (parent.children if parent else self.routes), i
        raise NotFound(f"No navigation node at {path}")

    def match_section(self, slug: str) -> Optional[NavRoute]:
        """Find the top-level route a section slug denotes.

        Heuristics are tried in order across all routes: exact path, explicit
        slug field, slugified title, then the section prefix of the first
        child's path.
        """
        path = doc_path(slug)
        for route in self.routes:
            if route.path == path:
                return route
        for route in self.routes:
            if route.slug is not None and route.slug == slug:
                return route
        for route in self.routes:
            if slugify(route.title) == slug:
                return route
        for route in self.routes:
            if route.children:
                first = route.children[0].path or route.children[0].slug
                if first and path_to_slug(first).split('/')[0] == slug:
                    return route
        return None

    @staticmethod
    def child_refs(section: NavRoute) -> list[ChildRef]:
        """Listing entries synthesized from a section's children."""
        return [
            ChildRef(title=child.title, slug=child.slug or path_to_slug(child.path))
            for child in section.children or []
        ]

    def positions(self) -> dict[str, int]:
        """Slug -> sibling position for every node; the first occurrence wins."""
        result: dict[str, int] = {}
        for node, _, i in self.walk():
            result.setdefault(path_to_slug(node.path), i)
        return result

    def leaf_paths(self, include_top_level: bool = False) -> list[str]:
        """Paths of document references (nodes without children)."""
        return [
            node.path for node, parent, _ in self.walk()
            if not node.is_section and (parent is not None or include_top_level)
        ]

    # --- commands ---

    def validate(self) -> None:
        """Raise ValidationFailure when a title or path is empty or a path appears twice."""
        seen: set[str] = set()
        for node, _, _ in self.walk():
            if not node.title.strip():
                raise ValidationFailure(f"Navigation node at {node.path} has an empty title")
            if not node.path.strip():
                raise ValidationFailure(f"Navigation node '{node.title}' has an empty path")
            if node.path in seen:
                raise ValidationFailure(f"Duplicate navigation path {node.path}")
            seen.add(node.path)

    def insert(self, route: NavRoute, parent_path: Optional[str] = None, index: Optional[int] = None) -> NavRoute:
        """Insert route at the top level or under parent_path; appends when index is None."""
        existing = set(self.paths())
        new_paths = NavTree([route]).paths()
        clash = next((p for p in new_paths if p in existing), None)
        if clash:
            raise ValidationFailure(f"Navigation path {clash} already exists")

        if parent_path is None:
            siblings = self.routes
        else:
            parent = self.find(parent_path)
            if parent is None:
                raise NotFound(f"No navigation node at {parent_path}")
            if parent.children is None:
                parent.children = []
            siblings = parent.children

        node = route.model_copy(deep=True)
        if index is None:
            siblings.append(node)
        else:
            siblings.insert(max(0, min(index, len(siblings))), node)
        return node

    def remove(self, path: str, keep_top_level: bool = False) -> int:
        """Remove every node at path (and its subtree). Returns count removed."""
        def _prune(siblings: list[NavRoute], top: bool) -> int:
            removed = 0
            kept = []
            for node in siblings:
                if node.path == path and not (top and keep_top_level):
                    removed += 1
                    continue
                if node.children:
                    removed += _prune(node.children, False)
                kept.append(node)
            siblings[:] = kept
            return removed

        return _prune(self.routes, True)

    def rename(self, path: str, title: str) -> NavRoute:
        node = self.find(path)
        if node is None:
            raise NotFound(f"No navigation node at {path}")
        node.title = title
        return node

    def move_section(self, active_path: str, over_path: str) -> None:
        """Move a top-level route to the position of another top-level route."""
        paths = [r.path for r in self.routes]
        if active_path not in paths or over_path not in paths:
            raise NotFound("Both sections must be top-level navigation nodes")
        _array_move(self.routes, paths.index(active_path), paths.index(over_path))
        self.renumber()

    def move_document(self, active_path: str, over_path: str) -> None:
        """Move a document onto the position of another document.

        Within one section this is an array move; across sections the document
        is spliced out of its section and into the target section at the drop
        index, so it never appears twice or not at all.
        """
        source, old_index = self._siblings_of(active_path)
        target, new_index = self._siblings_of(over_path)
        if source is self.routes or target is self.routes:
            raise ValidationFailure("Documents can only be moved between section children")
        if source is target:
            _array_move(source, old_index, new_index)
        else:
            target.insert(new_index, source.pop(old_index))
        self.renumber()

    def move_document_to(self, path: str, section_path: str, index: Optional[int] = None) -> None:
        """Move a document into section_path's children at index (appends when None)."""
        section = self.find(section_path)
        if section is None:
            raise NotFound(f"No navigation node at {section_path}")
        moving = self.find(path)
        if moving is None:
            raise NotFound(f"No navigation node at {path}")
        if section_path in NavTree([moving]).paths():
            raise ValidationFailure(f"Cannot move {path} into itself")
        source, old_index = self._siblings_of(path)
        node = source.pop(old_index)
        if section.children is None:
            section.children = []
        position = len(section.children) if index is None else max(0, min(index, len(section.children)))
        section.children.insert(position, node)
        self.renumber()

    def renumber(self) -> None:
        """Refresh the client-side orderIndex of every node from its array position."""
        for node, _, i in self.walk():
            node.order_index = i

    def to_routes(self) -> list[NavRoute]:
        return [r.model_copy(deep=True) for r in self.routes]
