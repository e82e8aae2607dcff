"""Housekeeping endpoints for external schedulers."""

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from smart_checkin.database import get_db, utcnow
from smart_checkin.security.auth import require_cron_secret
from smart_checkin.tasks.scheduler import sweep_challenges

router = APIRouter()


@router.post("/cleanup-challenges")
async def cleanup_challenges(
    _: None = Depends(require_cron_secret),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    Delete expired WebAuthn challenges.

    Meant for a cron job; protected by the cron bearer secret when one is
    configured.
    """
    deleted_count = await sweep_challenges(db, trigger="http")

    return {
        "success": True,
        "deletedCount": deleted_count,
        "timestamp": utcnow().isoformat() + "Z",
    }
