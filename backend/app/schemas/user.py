from datetime import datetime
from typing import Optional
from pydantic import Field
from app.schemas.base import CamelModel


class UserCreate(CamelModel):
    employee_id: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=200)
    role: str = "nurse"
    department: Optional[str] = None
    shift: Optional[str] = None


class UserProfileUpdate(CamelModel):
    name: Optional[str] = None
    department: Optional[str] = None
    shift: Optional[str] = None


class UserResponse(CamelModel):
    id: int
    employee_id: str
    name: str
    role: str
    department: Optional[str] = None
    shift: Optional[str] = None
    created_at: Optional[datetime] = None


class AuthResponse(CamelModel):
    token: str
    user: UserResponse
