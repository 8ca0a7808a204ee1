"""Existence-only schema reconciliation.

On startup every table in the expected-table registry is checked once. Only
missing tables are created; existing tables are never altered. Creation is
best effort: one table failing does not stop the others, and the failures are
returned in the report.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from dataclasses import dataclass, field

from sqlalchemy import inspect
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from rada.db.registry import EXPECTED_TABLES, ExpectedTable, validate_registry

logger = logging.getLogger(__name__)


@dataclass
class ReconcileReport:
    """Outcome of one reconcile() run."""

    present: list[str] = field(default_factory=list)
    created: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def ddl_executed(self) -> int:
        return len(self.created) + len(self.failed)

    def as_dict(self) -> dict[str, object]:
        return {
            "present": self.present,
            "created": self.created,
            "failed": self.failed,
            "ok": self.ok,
        }


class SchemaReconciler:
    """Creates the registry tables missing from the database behind ``engine``."""

    def __init__(self, engine: AsyncEngine, registry: tuple[ExpectedTable, ...] = EXPECTED_TABLES) -> None:
        self.engine = engine
        self.registry = registry

    async def existing_tables(self) -> set[str]:
        """Names of registry tables that currently exist."""

        def _check(sync_conn: Connection) -> set[str]:
            inspector = inspect(sync_conn)
            return {entry.name for entry in self.registry if inspector.has_table(entry.name)}

        async with self.engine.connect() as conn:
            return await conn.run_sync(_check)

    async def missing_tables(self) -> list[str]:
        """Registry tables not present, in creation order."""
        existing = await self.existing_tables()
        return [e.name for e in self.registry if e.name not in existing]

    async def reconcile(self) -> ReconcileReport:
        """Create every missing table, in registry order."""
        validate_registry(self.registry)

        existing = await self.existing_tables()
        report = ReconcileReport(present=[e.name for e in self.registry if e.name in existing])
        missing = [e for e in self.registry if e.name not in existing]

        if not missing:
            logger.info("Schema up to date (%d tables present)", len(report.present))
            return report

        logger.info("Creating %d missing tables: %s", len(missing), ", ".join(e.name for e in missing))
        for entry in missing:
            try:
                async with self.engine.begin() as conn:
                    await conn.run_sync(entry.table.create)
            except SQLAlchemyError:
                logger.exception("Failed to create table %s", entry.name)
                report.failed.append(entry.name)
            else:
                report.created.append(entry.name)

        if report.failed:
            logger.error("Schema reconciliation incomplete; failed tables: %s", ", ".join(report.failed))
        else:
            logger.info("Schema reconciliation created %d tables", len(report.created))
        return report


async def _run() -> ReconcileReport:
    from rada.config import get_settings
    from rada.database import build_engine

    settings = get_settings()
    engine = build_engine(settings.database_url)
    try:
        return await SchemaReconciler(engine).reconcile()
    finally:
        await engine.dispose()


def main() -> None:
    """Console entry point: ``rada-reconcile``."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    report = asyncio.run(_run())
    print(f"present: {', '.join(report.present) or '-'}")  # noqa: T201
    print(f"created: {', '.join(report.created) or '-'}")  # noqa: T201
    print(f"failed:  {', '.join(report.failed) or '-'}")  # noqa: T201
    sys.exit(0 if report.ok else 1)


if __name__ == "__main__":
    main()
