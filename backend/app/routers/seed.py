from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from app.config import get_settings
from app.database import get_db
from app.logging_config import get_logger
from app.services.seed_service import seed_sample_data

router = APIRouter()

logger = get_logger(__name__)


@router.post("/init-data")
async def init_data(db: AsyncSession = Depends(get_db)):
    """Load sample patients and handovers. Development only."""
    if not get_settings().enable_init_data:
        raise HTTPException(status_code=404, detail="Not found")
    try:
        created = await seed_sample_data(db)
    except Exception:
        logger.error("init_data_failed", exc_info=True)
        await db.rollback()
        raise HTTPException(status_code=500, detail="Failed to initialize data")

    logger.info("sample_data_initialized", **created)
    return {"message": "Sample data initialized successfully", "created": created}
