"""Expected-table registry consulted by the schema reconciler.

Order matters: every table appears after the tables its foreign keys point at.
``validate_registry`` checks that, and that the declared dependencies agree
with the foreign keys actually present on each table.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import Table

from rada.db import models  # noqa: F401  (registers tables on Base.metadata)
from rada.db.base import Base


class RegistryError(Exception):
    """The expected-table registry is not a valid creation order."""


@dataclass(frozen=True)
class ExpectedTable:
    name: str
    table: Table
    depends_on: tuple[str, ...] = ()


def _entry(name: str, *depends_on: str) -> ExpectedTable:
    return ExpectedTable(name=name, table=Base.metadata.tables[name], depends_on=depends_on)


EXPECTED_TABLES: tuple[ExpectedTable, ...] = (
    _entry("users"),
    _entry("xp_transactions", "users"),
    _entry("badges"),
    _entry("user_badges", "users", "badges"),
    _entry("quizzes"),
    _entry("user_quiz_attempts", "users", "quizzes"),
    _entry("learning_challenges"),
    _entry("user_challenges", "users", "learning_challenges"),
    _entry("posts", "users"),
    _entry("post_likes", "posts", "users"),
    _entry("comments", "posts", "users"),
    _entry("polls"),
    _entry("poll_votes", "polls", "users"),
    _entry("memory_archive"),
    _entry("politicians"),
    _entry("voting_records", "politicians"),
)


def validate_registry(registry: tuple[ExpectedTable, ...] = EXPECTED_TABLES) -> None:
    """Raise RegistryError unless ``registry`` is a valid topological order."""
    seen: set[str] = set()
    for entry in registry:
        if entry.name in seen:
            msg = f"Table {entry.name!r} is registered twice"
            raise RegistryError(msg)
        if entry.table.name != entry.name:
            msg = f"Registry name {entry.name!r} does not match table {entry.table.name!r}"
            raise RegistryError(msg)

        for dep in entry.depends_on:
            if dep not in seen:
                msg = f"Table {entry.name!r} depends on {dep!r}, which is not registered before it"
                raise RegistryError(msg)

        # Self-references (threaded comments) need no ordering.
        referenced = {fk.column.table.name for fk in entry.table.foreign_keys} - {entry.name}
        undeclared = referenced - set(entry.depends_on)
        if undeclared:
            msg = f"Table {entry.name!r} references undeclared dependencies: {sorted(undeclared)}"
            raise RegistryError(msg)

        seen.add(entry.name)
