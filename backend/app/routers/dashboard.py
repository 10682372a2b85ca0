from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.auth import get_current_user, TokenPrincipal
from app.logging_config import get_logger
from app.services.handover_service import is_today
from app.services.storage_service import storage

router = APIRouter()

logger = get_logger(__name__)


@router.get("/stats")
async def get_dashboard_stats(
    db: AsyncSession = Depends(get_db),
    current_user: TokenPrincipal = Depends(get_current_user),
):
    try:
        handovers = await storage.get_handovers_by_nurse(db, current_user.id)
    except Exception:
        logger.error("dashboard_stats_failed", nurse_id=current_user.id, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch stats")

    return {
        "todayHandovers": sum(1 for h in handovers if is_today(h.created_at)),
        "totalHandovers": len(handovers),
    }
