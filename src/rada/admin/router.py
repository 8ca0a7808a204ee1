"""Admin back-office endpoints, gated by X-Admin-Key."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from rada.admin.schemas import BulkImportResponse, PostApprovalResponse
from rada.admin.service import import_voting_records
from rada.community.service import CommunityService
from rada.dependencies import get_db, get_redis_dep, require_admin
from rada.gamification.schemas import award_response
from rada.gamification.xp_service import publish_pending_events

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/admin", tags=["Admin"], dependencies=[Depends(require_admin)])


@router.post("/voting-records/bulk-import", response_model=BulkImportResponse)
async def bulk_import_voting_records(
    body: dict[str, Any] = Body(...),  # noqa: B008
    db: AsyncSession = Depends(get_db),
):
    """Import voting records, reporting every record's outcome by index."""
    records = body.get("records")
    if not isinstance(records, list) or not records:
        raise HTTPException(status_code=400, detail="Records array is required")

    outcome = await import_voting_records(db, records)
    await db.commit()
    logger.info("bulk_import_voting_records", imported=outcome.imported, failed=outcome.failed)
    return BulkImportResponse(imported=outcome.imported, failed=outcome.failed, results=outcome.results)


@router.post("/posts/{post_id}/approve", response_model=PostApprovalResponse)
async def approve_post(
    post_id: int,
    db: AsyncSession = Depends(get_db),
    redis: object | None = Depends(get_redis_dep),
):
    """Verify a post so it appears in the feed, rewarding its author once."""
    result = await CommunityService(db).approve_post(post_id)
    await db.commit()
    await publish_pending_events(db, redis)
    return PostApprovalResponse(post_id=result.post.id, verified=result.post.verified, reward=award_response(result.award))
