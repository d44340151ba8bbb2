"""Domain models exchanged between the content core and its callers"""

from datetime import datetime
from enum import Enum
from typing import Any, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class Outcome(str, Enum):
    """Closed set of results a caller-facing operation can report"""
    ok = "ok"
    bad_request = "bad_request"
    unauthorized = "unauthorized"
    forbidden = "forbidden"
    not_found = "not_found"
    conflict = "conflict"
    internal_error = "internal_error"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]


_STATUS_CODES = {
    Outcome.ok: 200,
    Outcome.bad_request: 400,
    Outcome.unauthorized: 401,
    Outcome.forbidden: 403,
    Outcome.not_found: 404,
    Outcome.conflict: 409,
    Outcome.internal_error: 500,
}


class Actor(BaseModel):
    """The authenticated user performing an operation."""
    id: str
    role: str = "user"


class NavRoute(BaseModel):
    """One node of a navigation tree; a node with children is a section.

    Unknown keys sent by clients are kept so a stored tree round-trips unchanged.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    title: str
    path: str
    slug: Optional[str] = None
    order_index: Optional[int] = Field(default=None, alias="orderIndex")
    children: Optional[List["NavRoute"]] = None

    @property
    def is_section(self) -> bool:
        return self.children is not None


class Navigation(BaseModel):
    """A project's navigation tree as seen by callers; routes is never None."""
    id: Optional[UUID] = None
    project_id: Optional[UUID] = None
    title: str = "Documentation"
    version: str = "1.0"
    routes: List[NavRoute] = Field(default_factory=list)
    revision: Optional[int] = None

    def structure(self) -> dict[str, Any]:
        """The persisted form: title, version and routes only."""
        return {
            "title": self.title,
            "version": self.version,
            "routes": [r.model_dump(by_alias=True, exclude_none=True) for r in self.routes],
        }


class DocContent(BaseModel):
    """A published document with its content blocks"""
    id: Optional[UUID] = None
    slug: str
    title: str
    description: Optional[str] = None
    blocks: list[dict[str, Any]] = Field(default_factory=list)
    published: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None


class DocMeta(BaseModel):
    """Document listing entry (no blocks)"""
    id: Optional[UUID] = None
    slug: str
    title: str
    description: Optional[str] = None
    published: bool = True
    order_index: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ChildRef(BaseModel):
    """A child page listed on a section page"""
    title: str
    slug: str


class ResolutionKind(str, Enum):
    document = "document"
    section_with_overview = "section_with_overview"
    section_without_overview = "section_without_overview"
    not_found = "not_found"


class Resolution(BaseModel):
    """What a docs URL denotes within a project."""
    kind: ResolutionKind
    slug: str = ""
    document: Optional[DocContent] = None
    section: Optional[NavRoute] = None
    children: list[ChildRef] = Field(default_factory=list)


class SearchResult(BaseModel):
    kind: Literal["section", "document"]
    title: str
    slug: str
    description: Optional[str] = None
    section: Optional[str] = None       # humanized section label for nested documents
    child_count: Optional[int] = None   # sections only


class HandlerResult(BaseModel):
    """Response of a protocol handler; never carries internal diagnostics."""
    outcome: Outcome
    error: Optional[str] = None
    section: Optional[NavRoute] = None

    @property
    def ok(self) -> bool:
        return self.outcome == Outcome.ok
