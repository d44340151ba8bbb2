"""Database table definitions for projects, members, documents and navigation trees"""

from datetime import datetime
from typing import Optional, List, Dict, Any
from uuid import UUID, uuid4

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, DateTime, JSON, Text, String, UniqueConstraint


class Project(SQLModel, table=True):
    """A documentation tenant; its id scopes every document and navigation row"""
    __tablename__ = "projects"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    slug: str = Field(..., sa_column=Column(String(255), nullable=False, unique=True, index=True))
    name: str = Field(..., sa_column=Column(Text, nullable=False))
    meta: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    created_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    updated_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))


class ProjectMember(SQLModel, table=True):
    """Role of a user within a project (viewer, editor, admin, owner)"""
    __tablename__ = "project_members"
    project_id: UUID = Field(foreign_key="projects.id", primary_key=True)
    user_id: str = Field(primary_key=True)
    role: str = Field(..., sa_column=Column(String(32), nullable=False))


class Document(SQLModel, table=True):
    """A documentation page; the source of truth for content, publish state and title"""
    __tablename__ = "documents"
    __table_args__ = (UniqueConstraint("project_id", "slug", name="uq_documents_project_slug"),)
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    project_id: UUID = Field(..., foreign_key="projects.id", index=True, nullable=False)
    slug: str = Field(..., index=True, nullable=False)
    title: str = Field(..., sa_column=Column(Text, nullable=False))
    description: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    blocks: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    published: bool = Field(default=True, nullable=False)
    order_index: int = Field(default=0, nullable=False, description="Position among siblings in the navigation tree")
    created_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    updated_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    created_by: Optional[str] = Field(default=None)
    updated_by: Optional[str] = Field(default=None)


class Navigation(SQLModel, table=True):
    """The single navigation tree of a project, stored as one JSON structure"""
    __tablename__ = "navigation"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    project_id: UUID = Field(..., foreign_key="projects.id", nullable=False, unique=True, index=True)
    # Legacy rows may hold a JSON string here instead of an object.
    structure: Optional[Any] = Field(default=None, sa_column=Column(JSON, nullable=True))
    revision: int = Field(default=1, nullable=False, description="Incremented on every structure replace")
    updated_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    updated_by: Optional[str] = Field(default=None)
