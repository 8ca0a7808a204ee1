"""Admin operations: voting-record bulk import."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rada.admin.schemas import ImportItemResult, VotingRecordIn
from rada.db.models import Politician, VotingRecord

logger = logging.getLogger(__name__)


@dataclass
class BulkImportResult:
    results: list[ImportItemResult] = field(default_factory=list)

    @property
    def imported(self) -> int:
        return sum(1 for r in self.results if r.ok)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.ok)


def _validation_message(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "record"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


async def import_voting_records(db: AsyncSession, records: list[Any]) -> BulkImportResult:
    """Validate every record and insert the valid ones.

    Each record's outcome is reported by index. Valid rows are flushed
    together; the caller commits them as one transaction.
    """
    outcome = BulkImportResult()
    parsed: list[tuple[int, VotingRecordIn]] = []

    for index, raw in enumerate(records):
        if not isinstance(raw, dict):
            outcome.results.append(ImportItemResult(index=index, ok=False, error="Record must be an object"))
            continue
        try:
            parsed.append((index, VotingRecordIn.model_validate(raw)))
        except ValidationError as exc:
            outcome.results.append(ImportItemResult(index=index, ok=False, error=_validation_message(exc)))

    politician_ids = {rec.politician_id for _, rec in parsed}
    known: set[int] = set()
    if politician_ids:
        result = await db.execute(select(Politician.id).where(Politician.id.in_(politician_ids)))
        known = set(result.scalars().all())

    rows: list[tuple[int, VotingRecord]] = []
    for index, rec in parsed:
        if rec.politician_id not in known:
            outcome.results.append(
                ImportItemResult(index=index, ok=False, error=f"Politician {rec.politician_id} not found")
            )
            continue
        row = VotingRecord(**rec.model_dump())
        db.add(row)
        rows.append((index, row))

    await db.flush()
    for index, row in rows:
        outcome.results.append(ImportItemResult(index=index, ok=True, id=row.id))

    outcome.results.sort(key=lambda r: r.index)
    logger.info("Voting record import: %d imported, %d failed", outcome.imported, outcome.failed)
    return outcome
