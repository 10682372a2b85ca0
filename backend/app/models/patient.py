from sqlalchemy import Column, Integer, String, Date, Text, DateTime
from sqlalchemy.sql import func
from app.database import Base


class Patient(Base):
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(String(20), unique=True, index=True, nullable=False)
    name = Column(String(200), nullable=False)
    room = Column(String(50))
    ward = Column(String(50), index=True)
    status = Column(String(20), default="active", index=True)
    date_of_birth = Column(Date)
    gender = Column(String(20))
    medical_record_number = Column(String(50))
    primary_diagnosis = Column(Text)
    attending_physician = Column(String(200))
    emergency_contact = Column(String(200))
    insurance_info = Column(String(200))
    allergies = Column(Text)
    medications = Column(Text)
    notes = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
