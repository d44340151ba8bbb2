"""Navigation reconciliation: find and fix drift between a tree and its documents"""

import logging
from dataclasses import dataclass, field
from uuid import UUID

from sqlmodel import Session

from docsnav.config import Settings
from docsnav.core.errors import ValidationFailure
from docsnav.core.models import NavRoute, Navigation
from docsnav.core.tree import NavTree, decode_structure
from docsnav.core.utils.slug import path_to_slug
from docsnav.crud import documents, navigation as nav_store


logger = logging.getLogger(__name__)


@dataclass
class RepairReport:
    project_id: UUID
    issues: list[str] = field(default_factory=list)
    pruned: list[str] = field(default_factory=list)      # tree paths removed (no document, or duplicate)
    unlisted: list[str] = field(default_factory=list)    # published slugs the tree never references
    changed: bool = False


def _drop_duplicates(routes: list[NavRoute], seen: set[str]) -> list[str]:
    """Remove every repeat of an already-seen path, keeping the first occurrence."""
    dropped = []
    kept = []
    for node in routes:
        if node.path in seen:
            dropped.append(node.path)
            continue
        seen.add(node.path)
        if node.children:
            dropped += _drop_duplicates(node.children, seen)
        kept.append(node)
    routes[:] = kept
    return dropped


def _settings(settings: Settings | None) -> Settings:
    return settings or Settings()


def check_navigation(session: Session, project_id: UUID, settings: Settings | None = None) -> list[str]:
    """Describe every problem with a project's stored navigation; [] when healthy."""
    settings = _settings(settings)
    row = nav_store.get_latest(session, project_id)
    if row is None:
        return ["no navigation found"]

    decoded = decode_structure(row.structure, settings.nav_title, settings.nav_version)
    issues = list(decoded.issues)
    tree = NavTree(decoded.routes)
    try:
        tree.validate()
    except ValidationFailure as e:
        issues.append(str(e))

    slugs = documents.list_slugs(session, project_id)
    for path in tree.leaf_paths():
        if path_to_slug(path) not in slugs:
            issues.append(f"reference {path} has no document")

    referenced = {path_to_slug(p) for p in tree.paths()}
    for slug in sorted(documents.list_slugs(session, project_id, published_only=True) - referenced):
        issues.append(f"document {slug} is not in the navigation")
    return issues


def repair_navigation(
    session: Session,
    project_id: UUID,
    dry_run: bool = False,
    settings: Settings | None = None,
    ) -> RepairReport:
    """Normalize the stored structure and prune references to missing documents.

    Unreferenced documents are reported, not placed. Running twice is a no-op
    the second time. Flushes but does not commit - caller controls the transaction.
    """
    settings = _settings(settings)
    report = RepairReport(project_id=project_id)
    row = nav_store.get_latest(session, project_id)
    if row is None:
        report.issues.append("no navigation found")
        return report

    decoded = decode_structure(row.structure, settings.nav_title, settings.nav_version)
    report.issues += decoded.issues
    tree = NavTree(decoded.routes)

    report.pruned += _drop_duplicates(tree.routes, set())
    slugs = documents.list_slugs(session, project_id)
    for path in tree.leaf_paths():
        if path_to_slug(path) not in slugs:
            tree.remove(path, keep_top_level=True)
            report.pruned.append(path)

    referenced = {path_to_slug(p) for p in tree.paths()}
    report.unlisted = sorted(documents.list_slugs(session, project_id, published_only=True) - referenced)

    report.changed = bool(decoded.issues or report.pruned)
    if report.changed and not dry_run:
        structure = Navigation(title=decoded.title, version=decoded.version, routes=tree.routes).structure()
        nav_store.replace(session, project_id, structure)
        logger.info("Navigation of project %s repaired: %d issue(s), %d node(s) pruned",
                    project_id, len(report.issues), len(report.pruned))
    return report
