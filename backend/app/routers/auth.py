from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.auth import create_token
from app.logging_config import get_logger
from app.schemas.user import AuthResponse, UserCreate, UserResponse
from app.services.storage_service import storage

router = APIRouter()
password_router = APIRouter()

logger = get_logger(__name__)


@router.post("/login", response_model=AuthResponse)
async def login(body: dict, db: AsyncSession = Depends(get_db)):
    """Body: {"employeeId": "N1001", "password": "..."}"""
    employee_id = body.get("employeeId") or body.get("employee_id")
    password = body.get("password")
    if not employee_id or not password:
        raise HTTPException(status_code=400, detail="Employee ID and password are required")

    try:
        user = await storage.validate_user(db, str(employee_id), str(password))
    except Exception:
        logger.error("login_failed", employee_id=employee_id, exc_info=True)
        raise HTTPException(status_code=500, detail="Login failed")
    if not user:
        logger.info("login_rejected", employee_id=employee_id)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    return AuthResponse(token=create_token(user), user=UserResponse.model_validate(user))


@router.post("/register", response_model=AuthResponse)
async def register(body: dict, db: AsyncSession = Depends(get_db)):
    try:
        data = UserCreate.model_validate(body)
    except ValidationError:
        raise HTTPException(status_code=400, detail="Registration failed")

    existing = await storage.get_user_by_employee_id(db, data.employee_id)
    if existing:
        raise HTTPException(status_code=400, detail="Employee ID already exists")

    try:
        user = await storage.create_user(db, data.model_dump())
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=400, detail="Registration failed")

    logger.info("user_registered", employee_id=user.employee_id)
    return AuthResponse(token=create_token(user), user=UserResponse.model_validate(user))


@password_router.post("/forgot-password")
async def forgot_password(body: dict):
    """Acknowledges a reset request. Reset links are not delivered yet."""
    email = body.get("email")
    email = email.strip() if isinstance(email, str) else ""
    if not email:
        return JSONResponse(status_code=400, content={"error": "Email is required"})

    logger.info("password_reset_requested", email=email)
    return {"message": "Password reset link sent to email"}
