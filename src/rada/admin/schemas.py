"""Admin back-office schemas."""

from __future__ import annotations

from datetime import date
from typing import Literal

from pydantic import Field

from rada.gamification.schemas import AwardResponse
from rada.schemas import CamelModel


class VotingRecordIn(CamelModel):
    """One voting record in a bulk import. Validated independently of its siblings."""

    politician_id: int = Field(gt=0)
    bill_title: str = Field(min_length=1, max_length=300)
    bill_number: str = Field(min_length=1, max_length=64)
    bill_description: str | None = None
    vote_date: date
    vote_value: Literal["Yes", "No", "Abstain", "Absent"]
    category: str = Field(default="General", max_length=64)
    significance: Literal["low", "medium", "high"] = "medium"
    reasoning: str | None = None
    bill_passed: bool | None = None
    source_links: list[str] | None = None


class ImportItemResult(CamelModel):
    index: int
    ok: bool
    id: int | None = None
    error: str | None = None


class BulkImportResponse(CamelModel):
    imported: int
    failed: int
    results: list[ImportItemResult]


class PostApprovalResponse(CamelModel):
    post_id: int
    verified: bool
    reward: AwardResponse
