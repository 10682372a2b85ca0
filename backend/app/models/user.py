from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from app.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(String(50), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)  # passlib hash, never serialized
    name = Column(String(200), nullable=False)
    role = Column(String(50), nullable=False, default="nurse")
    department = Column(String(100))
    shift = Column(String(50))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
