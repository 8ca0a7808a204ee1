"""Declarative base shared by all ORM models."""

from typing import Any

from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests, MySQL).
JSONType = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    # Load server defaults right after INSERT so async code never lazy-loads them.
    __mapper_args__: dict[str, Any] = {"eager_defaults": True}
