"""Dialect-aware conflict-ignoring inserts.

The ledger relies on unique constraints rather than read-then-write checks.
``insert_ignore`` issues a single INSERT that silently skips rows violating a
unique constraint, and ``execute_insert_ignore`` reports whether the row landed.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import insert
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.dml import Insert


def insert_ignore(dialect_name: str, model: Any, values: dict[str, Any]) -> Insert:  # noqa: ANN401
    """Build an INSERT that ignores unique-constraint conflicts for ``dialect_name``."""
    if dialect_name == "postgresql":
        return pg_insert(model).values(**values).on_conflict_do_nothing()
    if dialect_name == "sqlite":
        return sqlite_insert(model).values(**values).on_conflict_do_nothing()
    if dialect_name in ("mysql", "mariadb"):
        return insert(model).values(**values).prefix_with("IGNORE")
    msg = f"Conflict-ignoring insert is not supported on dialect {dialect_name!r}"
    raise NotImplementedError(msg)


async def execute_insert_ignore(db: AsyncSession, model: Any, values: dict[str, Any]) -> bool:  # noqa: ANN401
    """Insert one row, skipping it on a unique conflict. Returns True if inserted."""
    stmt = insert_ignore(db.get_bind().dialect.name, model, values)
    result = await db.execute(stmt)
    return bool(result.rowcount)
