from app.models.user import User
from app.models.patient import Patient
from app.models.handover import Handover, HandoverStatus

__all__ = ["User", "Patient", "Handover", "HandoverStatus"]
