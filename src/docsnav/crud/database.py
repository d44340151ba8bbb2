"""Engine construction and schema creation"""

import json
from typing import Any

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

# Table classes must be imported for SQLModel.metadata to know about them.
from docsnav.crud import models  # noqa: F401


def _json_serializer(obj: Any) -> str:
    # Non-ASCII text stays literal so body search can match it.
    return json.dumps(obj, ensure_ascii=False)


def make_engine(db_url: str, **kwargs: Any) -> Engine:
    return create_engine(db_url, echo=False, json_serializer=_json_serializer, **kwargs)


def init_db(engine: Engine) -> None:
    """Create all tables that do not exist yet."""
    SQLModel.metadata.create_all(engine)


def reset_db(engine: Engine) -> None:
    """Drop and recreate every table."""
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
