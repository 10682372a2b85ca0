from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.auth import get_current_user, verify_password, TokenPrincipal
from app.logging_config import get_logger
from app.schemas.user import UserProfileUpdate, UserResponse
from app.services.handover_service import peak_activity
from app.services.storage_service import storage

router = APIRouter()

logger = get_logger(__name__)


@router.get("/profile", response_model=UserResponse)
async def get_profile(
    db: AsyncSession = Depends(get_db),
    current_user: TokenPrincipal = Depends(get_current_user),
):
    try:
        user = await storage.get_user(db, current_user.id)
    except Exception:
        logger.error("profile_fetch_failed", employee_id=current_user.employee_id, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch profile")
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return UserResponse.model_validate(user)


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    body: dict,
    db: AsyncSession = Depends(get_db),
    current_user: TokenPrincipal = Depends(get_current_user),
):
    try:
        data = UserProfileUpdate.model_validate(body)
    except ValidationError:
        raise HTTPException(status_code=400, detail="Failed to update profile")

    # empty strings leave the stored value untouched
    changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v}
    try:
        user = await storage.update_user(db, current_user.id, changes)
    except Exception:
        logger.error("profile_update_failed", employee_id=current_user.employee_id, exc_info=True)
        await db.rollback()
        raise HTTPException(status_code=500, detail="Failed to update profile")
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return UserResponse.model_validate(user)


@router.post("/change-password")
async def change_password(
    body: dict,
    db: AsyncSession = Depends(get_db),
    current_user: TokenPrincipal = Depends(get_current_user),
):
    current_password = body.get("currentPassword")
    new_password = body.get("newPassword")
    if not current_password or not new_password:
        raise HTTPException(status_code=400, detail="Current and new passwords are required")

    try:
        user = await storage.get_user(db, current_user.id)
        valid = bool(user) and verify_password(str(current_password), user.password)
        if valid:
            await storage.update_user(db, user.id, {"password": str(new_password)})
    except Exception:
        logger.error("password_change_failed", employee_id=current_user.employee_id, exc_info=True)
        await db.rollback()
        raise HTTPException(status_code=500, detail="Failed to change password")
    if not valid:
        raise HTTPException(status_code=401, detail="Current password is incorrect")

    logger.info("password_changed", employee_id=user.employee_id)
    return {"message": "Password updated successfully"}


@router.get("/reports")
async def get_reports(
    db: AsyncSession = Depends(get_db),
    current_user: TokenPrincipal = Depends(get_current_user),
):
    try:
        my_handovers = await storage.get_handovers_by_nurse(db, current_user.id)
        return {
            "totalActiveUsers": await storage.count_users(db),
            "totalVisits": await storage.count_patients_with_handovers(db),
            "myHandoversCount": len(my_handovers),
            "totalHandoversCount": await storage.count_handovers(db),
            "peakActivity": peak_activity(await storage.get_handover_timestamps(db)),
        }
    except Exception:
        logger.error("reports_failed", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch reports")
