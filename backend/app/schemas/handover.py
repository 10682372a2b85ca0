from datetime import datetime
from typing import Optional
from pydantic import BaseModel
from app.schemas.base import CamelModel


class ISBARReport(BaseModel):
    identify: str
    situation: str
    background: str
    assessment: str
    recommendation: str


class HandoverResponse(CamelModel):
    id: int
    patient_id: int
    nurser_id: int
    audio_path: Optional[str] = None
    transcription: Optional[str] = None
    isbar_report: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None


class TranscriptionResult(BaseModel):
    text: str
    duration: Optional[float] = None
