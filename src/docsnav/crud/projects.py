"""Project lookup, membership roles and tenant resolution"""

from typing import Any
from uuid import UUID

from sqlmodel import Session, select

from docsnav.crud.models import Project, ProjectMember


ROLE_RANKS = {"viewer": 1, "editor": 2, "admin": 3, "owner": 4}
SUPERUSER_ROLES = {"admin", "super_admin"}
_RESERVED_SUBDOMAINS = {"www", "localhost", "docs", "app"}


def get_by_slug(session: Session, slug: str) -> Project | None:
    return session.exec(select(Project).where(Project.slug == slug)).first()


def list_projects(session: Session) -> list[Project]:
    return list(session.exec(select(Project).order_by(Project.slug.asc())).all())


def create_project(session: Session, name: str, slug: str, meta: dict[str, Any] | None = None) -> Project:
    """Insert a project. Raises ValueError if the slug is taken."""
    if get_by_slug(session, slug) is not None:
        raise ValueError(f"A project with slug '{slug}' already exists")
    project = Project(name=name, slug=slug, meta=meta or {})
    session.add(project)
    session.flush()
    return project


def set_member_role(session: Session, project_id: UUID, user_id: str, role: str) -> ProjectMember:
    """Grant (or change) a user's role on a project."""
    if role not in ROLE_RANKS:
        raise ValueError(f"Unknown role '{role}'")
    member = session.get(ProjectMember, (project_id, user_id))
    if member is None:
        member = ProjectMember(project_id=project_id, user_id=user_id, role=role)
    else:
        member.role = role
    session.add(member)
    session.flush()
    return member


def get_member_role(session: Session, project_id: UUID, user_id: str) -> str | None:
    member = session.get(ProjectMember, (project_id, user_id))
    return member.role if member else None


def has_access(session: Session, user_id: str, user_role: str, project_id: UUID, min_role: str = "editor") -> bool:
    """True when the user is a global admin or holds at least min_role on the project."""
    if user_role in SUPERUSER_ROLES:
        return True
    role = get_member_role(session, project_id, user_id)
    return role is not None and ROLE_RANKS.get(role, 0) >= ROLE_RANKS[min_role]


def _slug_from_pathname(pathname: str) -> str | None:
    """'/projects/<slug>/docs/...' -> '<slug>'."""
    parts = [p for p in pathname.split('/') if p]
    if len(parts) >= 2 and parts[0] == "projects":
        return parts[1]
    return None


def _slug_from_hostname(hostname: str) -> str | None:
    """'<slug>.example.com' -> '<slug>'; bare or reserved hosts give None."""
    host = hostname.split(':')[0].lower()
    labels = host.split('.')
    if len(labels) < 3 or labels[0] in _RESERVED_SUBDOMAINS:
        return None
    return labels[0]


def resolve_project(
    session: Session,
    slug: str | None = None,
    hostname: str | None = None,
    pathname: str | None = None,
    ) -> Project | None:
    """Find the tenant project from an explicit slug, a /projects/<slug> path, or a subdomain."""
    candidate = slug or (pathname and _slug_from_pathname(pathname)) or (hostname and _slug_from_hostname(hostname))
    if not candidate:
        return None
    return get_by_slug(session, candidate)
