"""Content Manager: the single API over the document store and the navigation tree store.

Reads degrade gracefully (None, [] or an empty navigation) when storage fails.
Multi-step writes run in one session and commit once, so a document change and
the matching tree change land together or not at all. Boolean write methods
log and return False instead of raising; write_navigation and rename_section
raise the typed errors of docsnav.core.errors for protocol handlers.
"""

import logging
from collections.abc import Mapping
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from docsnav.config import Settings
from docsnav.core.errors import DocsNavError, NotFound, StorageFailure, Unauthorized, ValidationFailure
from docsnav.core.models import Actor, DocContent, DocMeta, NavRoute, Navigation
from docsnav.core.repair import RepairReport, repair_navigation
from docsnav.core.tree import NavTree, decode_structure
from docsnav.core.utils.slug import doc_path, path_to_slug
from docsnav.crud import documents, navigation as nav_store, projects
from docsnav.crud.models import Document, Project


logger = logging.getLogger(__name__)


def _to_content(doc: Document) -> DocContent:
    return DocContent(
        id=doc.id,
        slug=doc.slug,
        title=doc.title,
        description=doc.description,
        blocks=list(doc.blocks or []),
        published=doc.published,
        created_at=doc.created_at,
        updated_at=doc.updated_at,
        updated_by=doc.updated_by,
    )


def _to_meta(doc: Document) -> DocMeta:
    return DocMeta(
        id=doc.id,
        slug=doc.slug,
        title=doc.title,
        description=doc.description,
        published=doc.published,
        order_index=doc.order_index,
        created_at=doc.created_at,
        updated_at=doc.updated_at,
    )


def _require_actor(actor: Optional[Actor]) -> Actor:
    if actor is None or not actor.id:
        raise Unauthorized("User not authenticated")
    return actor


class ContentManager:
    """Mediates every read and write that touches documents and navigation."""

    def __init__(self, engine: Engine, settings: Settings | None = None):
        self.engine = engine
        self.settings = settings or Settings()

    # --- helpers ---

    def _empty_navigation(self, project_id: UUID) -> Navigation:
        return Navigation(
            project_id=project_id,
            title=self.settings.nav_title,
            version=self.settings.nav_version,
            routes=[],
        )

    def _load_navigation(self, session: Session, project_id: UUID) -> Navigation:
        row = nav_store.get_latest(session, project_id)
        if row is None:
            return self._empty_navigation(project_id)
        decoded = decode_structure(row.structure, self.settings.nav_title, self.settings.nav_version)
        if decoded.issues:
            logger.warning("Navigation of project %s normalized on read: %s", project_id, "; ".join(decoded.issues))
        return Navigation(
            id=row.id,
            project_id=project_id,
            title=decoded.title,
            version=decoded.version,
            routes=decoded.routes,
            revision=row.revision,
        )

    def _persist_tree(
        self,
        session: Session,
        project_id: UUID,
        navigation: Navigation,
        tree: NavTree,
        actor: Actor,
        expected_revision: int | None = None,
        ) -> Navigation:
        """Replace the stored structure with tree and sync document order indices."""
        if self.settings.conflict_policy != "reject":
            expected_revision = None
        stored = Navigation(title=navigation.title, version=navigation.version, routes=tree.routes)
        row = nav_store.replace(session, project_id, stored.structure(), actor.id, expected_revision)
        documents.set_order_indices(session, project_id, tree.positions())
        return Navigation(
            id=row.id,
            project_id=project_id,
            title=stored.title,
            version=stored.version,
            routes=tree.to_routes(),
            revision=row.revision,
        )

    def _soft(self, action: str, project_id: UUID, target: str, fn) -> bool:
        """Run fn, converting any domain or storage failure into a logged False."""
        try:
            fn()
        except DocsNavError as e:
            logger.warning("%s refused for project %s (%s): %s", action, project_id, target, e)
            return False
        except SQLAlchemyError as e:
            logger.error("%s failed for project %s (%s): %s", action, project_id, target, e)
            return False
        return True

    # --- documents ---

    def get_document(self, project_id: UUID, slug: str) -> DocContent | None:
        """Return the published document at slug, or None (missing, unpublished or unreadable)."""
        try:
            with Session(self.engine) as session:
                doc = documents.get_document(session, project_id, slug, published_only=True)
                return _to_content(doc) if doc else None
        except SQLAlchemyError as e:
            logger.error("Error fetching document %s of project %s: %s", slug, project_id, e)
            return None

    def list_documents(self, project_id: UUID) -> list[DocMeta]:
        """Published documents ordered by order_index."""
        try:
            with Session(self.engine) as session:
                return [_to_meta(d) for d in documents.list_published(session, project_id)]
        except SQLAlchemyError as e:
            logger.error("Error listing documents of project %s: %s", project_id, e)
            return []

    def search_documents(self, project_id: UUID, term: str, limit: int | None = None) -> list[DocMeta]:
        """Document Store substring search; [] when storage fails."""
        try:
            with Session(self.engine) as session:
                found = documents.search_documents(session, project_id, term, limit or self.settings.search_limit)
                return [_to_meta(d) for d in found]
        except SQLAlchemyError as e:
            logger.error("Search failed for project %s: %s", project_id, e)
            return []

    def save_document(self, project_id: UUID, slug: str, content: Mapping[str, Any] | BaseModel, actor: Optional[Actor]) -> bool:
        """Create or update the document at slug; new documents are published.

        Tree membership is not touched here (see add_document).
        """
        fields = content.model_dump(exclude_unset=True) if isinstance(content, BaseModel) else dict(content)

        def _save():
            user = _require_actor(actor)
            with Session(self.engine) as session:
                _, status = documents.upsert_document(session, project_id, slug, fields, user.id)
                session.commit()
            logger.info("Document %s %s in project %s by %s", slug, status, project_id, user.id)

        return self._soft("Save document", project_id, slug, _save)

    def delete_document(self, project_id: UUID, slug: str, actor: Optional[Actor]) -> bool:
        """Delete the document at slug and prune every tree reference to it, atomically.

        Deleting a missing document is a successful no-op. A top-level section
        whose path equals the slug is kept; only its overview document goes.
        """
        def _delete():
            user = _require_actor(actor)
            with Session(self.engine) as session:
                existed = documents.delete_document(session, project_id, slug)
                nav = self._load_navigation(session, project_id)
                tree = NavTree.from_navigation(nav)
                removed = tree.remove(doc_path(slug), keep_top_level=True)
                if removed:
                    self._persist_tree(session, project_id, nav, tree, user, nav.revision)
                session.commit()
            logger.info("Document %s deleted from project %s (existed=%s, tree refs removed=%d)",
                        slug, project_id, existed, removed)

        return self._soft("Delete document", project_id, slug, _delete)

    # --- navigation ---

    def get_navigation(self, project_id: UUID) -> Navigation:
        """The project's navigation, normalized; routes is never None."""
        try:
            with Session(self.engine) as session:
                return self._load_navigation(session, project_id)
        except SQLAlchemyError as e:
            logger.error("Error fetching navigation of project %s: %s", project_id, e)
            return self._empty_navigation(project_id)

    def write_navigation(self, project_id: UUID, navigation: Navigation, actor: Optional[Actor]) -> Navigation:
        """Replace the project's tree with navigation in one step; inserts the row if missing.

        Raises Unauthorized, ValidationFailure, NavigationConflict or StorageFailure.
        """
        user = _require_actor(actor)
        tree = NavTree.from_navigation(navigation)
        tree.validate()
        try:
            with Session(self.engine) as session:
                saved = self._persist_tree(session, project_id, navigation, tree, user, navigation.revision)
                session.commit()
        except SQLAlchemyError as e:
            raise StorageFailure(f"Navigation of project {project_id} could not be written") from e
        logger.info("Navigation of project %s replaced by %s (revision %s)", project_id, user.id, saved.revision)
        return saved

    def update_navigation(self, project_id: UUID, navigation: Navigation, actor: Optional[Actor]) -> bool:
        """Boolean form of write_navigation."""
        return self._soft("Update navigation", project_id, "navigation",
                          lambda: self.write_navigation(project_id, navigation, actor))

    def add_section(self, project_id: UUID, title: str, slug: str, actor: Optional[Actor], create_overview: bool = True) -> bool:
        """Append a top-level section, optionally with a published overview document."""
        slug = (slug or "").strip('/')

        def _add():
            user = _require_actor(actor)
            if not title or not title.strip() or not slug or '/' in slug:
                raise ValidationFailure("A section needs a title and a single-segment slug")
            with Session(self.engine) as session:
                nav = self._load_navigation(session, project_id)
                tree = NavTree.from_navigation(nav)
                tree.insert(NavRoute(title=title, path=doc_path(slug), children=[]))
                if create_overview and documents.get_document(session, project_id, slug) is None:
                    documents.upsert_document(session, project_id, slug, {"title": title}, user.id)
                self._persist_tree(session, project_id, nav, tree, user, nav.revision)
                session.commit()

        return self._soft("Add section", project_id, slug, _add)

    def add_document(
        self,
        project_id: UUID,
        section_slug: str,
        slug: str,
        title: str,
        actor: Optional[Actor],
        description: str | None = None,
        ) -> bool:
        """Create document '{section_slug}/{slug}' and append it to the section's children."""
        full_slug = f"{section_slug.strip('/')}/{slug.strip('/')}"

        def _add():
            user = _require_actor(actor)
            if not title or not title.strip() or not slug.strip('/'):
                raise ValidationFailure("A document needs a title and a slug")
            with Session(self.engine) as session:
                nav = self._load_navigation(session, project_id)
                tree = NavTree.from_navigation(nav)
                section = tree.match_section(section_slug)
                if section is None:
                    raise NotFound(f"Section {section_slug} not found")
                if documents.get_document(session, project_id, full_slug) is not None:
                    raise ValidationFailure(f"Document {full_slug} already exists")
                tree.insert(NavRoute(title=title, path=doc_path(full_slug)), parent_path=section.path)
                documents.upsert_document(
                    session, project_id, full_slug, {"title": title, "description": description}, user.id,
                )
                self._persist_tree(session, project_id, nav, tree, user, nav.revision)
                session.commit()

        return self._soft("Add document", project_id, full_slug, _add)

    def delete_section(self, project_id: UUID, section_slug: str, actor: Optional[Actor]) -> bool:
        """Remove a section node together with its overview and every document under it."""
        def _delete():
            user = _require_actor(actor)
            with Session(self.engine) as session:
                nav = self._load_navigation(session, project_id)
                tree = NavTree.from_navigation(nav)
                section = tree.match_section(section_slug)
                if section is None:
                    raise NotFound(f"Section {section_slug} not found")
                slugs = {section_slug} | {path_to_slug(p) for p in NavTree([section]).paths()}
                deleted = documents.delete_documents(session, project_id, slugs)
                tree.remove(section.path)
                self._persist_tree(session, project_id, nav, tree, user, nav.revision)
                session.commit()
            logger.info("Section %s deleted from project %s with %d document(s)", section_slug, project_id, deleted)

        return self._soft("Delete section", project_id, section_slug, _delete)

    def rename_section(self, project_id: UUID, section_slug: str, title: str, actor: Optional[Actor]) -> NavRoute:
        """Retitle the top-level section at '/docs/{section_slug}' and its overview document.

        Raises Unauthorized, ValidationFailure, NotFound or StorageFailure.
        """
        user = _require_actor(actor)
        if not title or not title.strip():
            raise ValidationFailure("Title is required")
        try:
            with Session(self.engine) as session:
                if nav_store.get_latest(session, project_id) is None:
                    raise NotFound("Navigation not found")
                nav = self._load_navigation(session, project_id)
                tree = NavTree.from_navigation(nav)
                path = doc_path(section_slug)
                if not any(r.path == path for r in tree.routes):
                    raise NotFound("Section not found")
                section = tree.rename(path, title)
                self._persist_tree(session, project_id, nav, tree, user, nav.revision)
                documents.set_title(session, project_id, section_slug, title, user.id)
                session.commit()
        except SQLAlchemyError as e:
            raise StorageFailure(f"Section {section_slug} of project {project_id} could not be renamed") from e
        return section.model_copy(deep=True)

    # --- collaborators ---

    def resolve_project(self, slug: str | None = None, hostname: str | None = None, pathname: str | None = None) -> Project | None:
        try:
            with Session(self.engine) as session:
                return projects.resolve_project(session, slug=slug, hostname=hostname, pathname=pathname)
        except SQLAlchemyError as e:
            logger.error("Error resolving project (slug=%s, host=%s): %s", slug, hostname, e)
            return None

    def check_access(self, actor: Optional[Actor], project_id: UUID, min_role: str = "editor") -> bool:
        if actor is None:
            return False
        try:
            with Session(self.engine) as session:
                return projects.has_access(session, actor.id, actor.role, project_id, min_role)
        except SQLAlchemyError as e:
            logger.error("Access check failed for %s on project %s: %s", actor.id, project_id, e)
            return False

    def reconcile(self, project_id: UUID, dry_run: bool = False) -> RepairReport:
        """Scan the project's tree against its documents and fix what can be fixed."""
        with Session(self.engine) as session:
            report = repair_navigation(session, project_id, dry_run=dry_run, settings=self.settings)
            if not dry_run:
                session.commit()
        return report
