"""Unit tests for crud/database.py"""

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine
from sqlmodel import Session

from docsnav.crud.database import init_db, make_engine, reset_db
from docsnav.crud.documents import upsert_document
from docsnav.crud.projects import create_project, list_projects


def test_init_db_creates_tables(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'test.db'}")
    assert isinstance(engine, Engine)
    init_db(engine)
    tables = set(inspect(engine).get_table_names())
    assert {"projects", "project_members", "documents", "navigation"} <= tables


def test_reset_db_clears_rows(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'test.db'}")
    init_db(engine)
    with Session(engine) as session:
        create_project(session, "Acme", "acme")
        session.commit()
    reset_db(engine)
    with Session(engine) as session:
        assert list_projects(session) == []


def test_json_columns_keep_non_ascii_literal(engine):
    """Blocks are stored with their characters intact, not as \\u escapes."""
    with Session(engine) as session:
        project = create_project(session, "Acme", "acme")
        upsert_document(session, project.id, "menu", {"title": "Menu", "blocks": [{"text": "café"}]})
        stored = session.connection().execute(text("SELECT blocks FROM documents")).scalar_one()
    assert "café" in stored
