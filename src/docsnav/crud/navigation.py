"""Navigation tree persistence: latest-row lookup and full-structure replace"""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlmodel import Session, select

from docsnav.core.errors import NavigationConflict
from docsnav.crud.models import Navigation


def get_latest(session: Session, project_id: UUID) -> Navigation | None:
    """Return the most recently updated navigation row of a project, or None."""
    return session.exec(
        select(Navigation)
        .where(Navigation.project_id == project_id)
        .order_by(Navigation.updated_at.desc())
    ).first()


def replace(
    session: Session,
    project_id: UUID,
    structure: Any,
    actor_id: str | None = None,
    expected_revision: int | None = None,
    ) -> Navigation:
    """Replace a project's navigation structure in one step, inserting the row if missing.

    When expected_revision is given and differs from the stored revision,
    raises NavigationConflict and writes nothing.
    Flushes but does not commit - caller controls the transaction.
    """
    row = get_latest(session, project_id)
    if row is None:
        row = Navigation(project_id=project_id, structure=structure, revision=1, updated_by=actor_id)
        session.add(row)
        session.flush()
        return row

    if expected_revision is not None and row.revision != expected_revision:
        raise NavigationConflict(
            f"Navigation of project {project_id} changed (revision {row.revision}, expected {expected_revision})",
            expected=expected_revision,
            actual=row.revision,
        )

    row.structure = structure
    row.revision += 1
    row.updated_by = actor_id
    row.updated_at = datetime.now()
    session.add(row)
    session.flush()
    return row
