from pydantic import Field, field_validator
from datetime import date, datetime
from typing import Optional
from app.schemas.base import CamelModel


class PatientBase(CamelModel):
    patient_id: str = Field(min_length=1, max_length=20)
    name: str = Field(min_length=1, max_length=200)
    room: Optional[str] = None
    ward: Optional[str] = None
    status: str = "active"
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    medical_record_number: Optional[str] = None
    primary_diagnosis: Optional[str] = None
    attending_physician: Optional[str] = None
    emergency_contact: Optional[str] = None
    insurance_info: Optional[str] = None
    allergies: Optional[str] = None
    medications: Optional[str] = None
    notes: Optional[str] = None


class PatientCreate(PatientBase):
    pass


class PatientUpdate(CamelModel):
    name: Optional[str] = None
    room: Optional[str] = None
    ward: Optional[str] = None
    status: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    medical_record_number: Optional[str] = None
    primary_diagnosis: Optional[str] = None
    attending_physician: Optional[str] = None
    emergency_contact: Optional[str] = None
    insurance_info: Optional[str] = None
    allergies: Optional[str] = None
    medications: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("name", "status")
    @classmethod
    def not_null(cls, v):
        # may be omitted, but the columns are NOT NULL
        if v is None:
            raise ValueError("must not be null")
        return v


class PatientResponse(PatientBase):
    id: int
    created_at: Optional[datetime] = None
