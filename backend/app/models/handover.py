import enum
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.sql import func
from app.database import Base


class HandoverStatus(str, enum.Enum):
    PROCESSING = "processing"
    TRANSCRIBED = "transcribed"
    COMPLETE = "complete"
    ERROR = "error"
    COMPLETED = "completed"  # seeded sample records


class Handover(Base):
    __tablename__ = "handovers"

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)
    nurser_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    audio_path = Column(String(1000))
    transcription = Column(Text)
    isbar_report = Column(Text)  # JSON-serialized ISBARReport
    status = Column(String(20), nullable=False, default=HandoverStatus.PROCESSING.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
