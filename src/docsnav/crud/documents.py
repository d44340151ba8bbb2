"""Document persistence: lookup, upsert, delete, ordered listing and substring search"""

from datetime import datetime
from typing import Any, Iterable
from uuid import UUID

from sqlalchemy import String, case, cast, func
from sqlmodel import Session, select

from docsnav.crud.models import Document


def get_document(session: Session, project_id: UUID, slug: str, published_only: bool = False) -> Document | None:
    """Return the Document at (project_id, slug), or None if not found."""
    stmt = select(Document).where(Document.project_id == project_id).where(Document.slug == slug)
    if published_only:
        stmt = stmt.where(Document.published == True)  # noqa: E712
    return session.exec(stmt).first()


def upsert_document(
    session: Session,
    project_id: UUID,
    slug: str,
    fields: dict[str, Any],
    actor_id: str | None = None,
    ) -> tuple[Document, str]:
    """Create or update the Document at (project_id, slug).

    Returns (doc, status) where status is 'created' or 'updated'.
    New documents are published unless fields say otherwise.
    Flushes but does not commit - caller controls the transaction.
    """
    title = fields.get('title') or "Untitled"
    description = fields.get('description') or None
    blocks = list(fields.get('blocks') or [])

    doc = get_document(session, project_id, slug)
    if doc:
        doc.title = title
        doc.description = description
        doc.blocks = blocks
        if 'published' in fields:
            doc.published = bool(fields['published'])
        doc.updated_by = actor_id
        doc.updated_at = datetime.now()
        session.add(doc)
        session.flush()
        return doc, 'updated'

    doc = Document(
        project_id=project_id,
        slug=slug,
        title=title,
        description=description,
        blocks=blocks,
        published=bool(fields.get('published', True)),
        order_index=int(fields.get('order_index') or 0),
        created_by=actor_id,
        updated_by=actor_id,
    )
    session.add(doc)
    session.flush()
    return doc, 'created'


def set_title(session: Session, project_id: UUID, slug: str, title: str, actor_id: str | None = None) -> bool:
    """Retitle the Document at slug if it exists. Returns True when a row changed."""
    doc = get_document(session, project_id, slug)
    if doc is None:
        return False
    doc.title = title
    doc.updated_by = actor_id
    doc.updated_at = datetime.now()
    session.add(doc)
    session.flush()
    return True


def delete_document(session: Session, project_id: UUID, slug: str) -> bool:
    """Delete the Document at slug. Returns False when there was nothing to delete."""
    doc = get_document(session, project_id, slug)
    if doc is None:
        return False
    session.delete(doc)
    session.flush()
    return True


def delete_documents(session: Session, project_id: UUID, slugs: Iterable[str]) -> int:
    """Delete every Document whose slug is in slugs. Returns count deleted."""
    slugs = list(slugs)
    if not slugs:
        return 0
    docs = session.exec(
        select(Document).where(Document.project_id == project_id).where(Document.slug.in_(slugs))
    ).all()
    for doc in docs:
        session.delete(doc)
    session.flush()
    return len(docs)


def list_published(session: Session, project_id: UUID) -> list[Document]:
    """Published documents of a project ordered by order_index, then creation time."""
    return list(session.exec(
        select(Document)
        .where(Document.project_id == project_id)
        .where(Document.published == True)  # noqa: E712
        .order_by(Document.order_index.asc(), Document.created_at.asc())
    ).all())


def list_slugs(session: Session, project_id: UUID, published_only: bool = False) -> set[str]:
    """All document slugs of a project."""
    stmt = select(Document.slug).where(Document.project_id == project_id)
    if published_only:
        stmt = stmt.where(Document.published == True)  # noqa: E712
    return set(session.exec(stmt).all())


def set_order_indices(session: Session, project_id: UUID, positions: dict[str, int]) -> int:
    """Write order_index for each slug in positions; only changed rows are touched. Returns count updated."""
    if not positions:
        return 0
    docs = session.exec(
        select(Document).where(Document.project_id == project_id).where(Document.slug.in_(list(positions)))
    ).all()
    updated = 0
    for doc in docs:
        if doc.order_index != positions[doc.slug]:
            doc.order_index = positions[doc.slug]
            session.add(doc)
            updated += 1
    session.flush()
    return updated


def _like_pattern(term: str) -> str:
    """Wrap term in % wildcards, escaping LIKE metacharacters."""
    escaped = term.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')
    return f"%{escaped}%"


def search_documents(session: Session, project_id: UUID, term: str, limit: int = 20) -> list[Document]:
    """Case-insensitive substring search over published documents.

    Title matches rank above description matches, which rank above body
    (blocks) matches; ties are broken by title ascending, ignoring case.
    """
    pattern = _like_pattern(term)
    title_hit = Document.title.ilike(pattern, escape='\\')
    description_hit = Document.description.ilike(pattern, escape='\\')
    body_hit = cast(Document.blocks, String).ilike(pattern, escape='\\')
    rank = case((title_hit, 1), (description_hit, 2), else_=3)
    return list(session.exec(
        select(Document)
        .where(Document.project_id == project_id)
        .where(Document.published == True)  # noqa: E712
        .where(title_hit | description_hit | body_hit)
        .order_by(rank, func.lower(Document.title).asc(), Document.title.asc())
        .limit(limit)
    ).all())
