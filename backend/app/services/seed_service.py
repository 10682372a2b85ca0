"""Sample ward data for local development (POST /api/init-data)."""

import json
from datetime import date
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from app.logging_config import get_logger
from app.models.handover import HandoverStatus
from app.services.storage_service import storage

logger = get_logger(__name__)

DEMO_NURSE = {
    "employee_id": "N0001",
    "password": "handover-demo",
    "name": "Demo Nurse",
    "role": "nurse",
    "department": "Medical Ward",
    "shift": "day",
}

SAMPLE_PATIENTS = [
    {
        "patient_id": "P001",
        "name": "John Smith",
        "room": "Room 301A",
        "ward": "3A",
        "status": "active",
        "date_of_birth": date(1978, 5, 20),
        "gender": "male",
        "medical_record_number": "MR123456",
        "primary_diagnosis": "Pneumonia",
        "attending_physician": "Dr. Johnson",
        "emergency_contact": "Jane Smith - 555-0123",
        "insurance_info": "BlueCross BlueShield",
        "allergies": "Penicillin",
        "medications": "Amoxicillin 500mg TID",
        "notes": "Patient recovering well",
    },
    {
        "patient_id": "P002",
        "name": "Maria Rodriguez",
        "room": "Room 302B",
        "ward": "3B",
        "status": "active",
        "date_of_birth": date(1985, 9, 12),
        "gender": "female",
        "medical_record_number": "MR123457",
        "primary_diagnosis": "Diabetes Type 2",
        "attending_physician": "Dr. Williams",
        "emergency_contact": "Carlos Rodriguez - 555-0124",
        "insurance_info": "Medicare",
        "allergies": "None",
        "medications": "Metformin 1000mg BID",
        "notes": "Blood sugar levels stable",
    },
    {
        "patient_id": "P003",
        "name": "Robert Johnson",
        "room": "Room 303A",
        "ward": "3A",
        "status": "active",
        "date_of_birth": date(1960, 12, 3),
        "gender": "male",
        "medical_record_number": "MR123458",
        "primary_diagnosis": "Hypertension",
        "attending_physician": "Dr. Brown",
        "emergency_contact": "Linda Johnson - 555-0125",
        "insurance_info": "Aetna",
        "allergies": "Aspirin",
        "medications": "Lisinopril 10mg daily",
        "notes": "BP monitoring required",
    },
]

# keyed by business code
SAMPLE_HANDOVERS = {
    "P001": {
        "transcription": "Patient John Smith in room 301A is stable. Vital signs normal. "
                         "Administered morning medications. Patient reports feeling better "
                         "and is requesting to ambulate.",
        "isbar_report": {
            "identify": "John Smith, 45-year-old male",
            "situation": "Recovering from pneumonia",
            "background": "Admitted 3 days ago with respiratory symptoms",
            "assessment": "Vital signs stable, improving respiratory status",
            "recommendation": "Continue current treatment plan, monitor respiratory status",
        },
    },
    "P002": {
        "transcription": "Maria Rodriguez in 302B had blood sugar level of 145 this morning. "
                         "Administered insulin as prescribed. Patient ate breakfast well and "
                         "is scheduled for diabetes education at 2 PM.",
        "isbar_report": {
            "identify": "Maria Rodriguez, 38-year-old female",
            "situation": "Diabetes management",
            "background": "Type 2 diabetes, recently diagnosed",
            "assessment": "Blood sugar levels within target range",
            "recommendation": "Continue current medication regimen, diabetes education",
        },
    },
    "P003": {
        "transcription": "Robert Johnson in 303A had elevated blood pressure this morning at "
                         "160/95. Administered additional antihypertensive medication. "
                         "Patient is resting comfortably.",
        "isbar_report": {
            "identify": "Robert Johnson, 63-year-old male",
            "situation": "Hypertension management",
            "background": "Long-standing hypertension",
            "assessment": "Blood pressure elevated this morning",
            "recommendation": "Monitor BP closely, consider medication adjustment",
        },
    },
}


async def seed_sample_data(db: AsyncSession, nurse_id: Optional[int] = None) -> dict:
    """Insert sample patients and handovers. Idempotent for patients."""
    if nurse_id is None:
        nurse = await storage.get_user_by_employee_id(db, DEMO_NURSE["employee_id"])
        if not nurse:
            nurse = await storage.create_user(db, DEMO_NURSE)
        nurse_id = nurse.id

    created_patients = 0
    created_handovers = 0
    for data in SAMPLE_PATIENTS:
        patient = await storage.get_patient_by_code(db, data["patient_id"])
        if patient:
            logger.info("sample_patient_exists", patient_id=data["patient_id"])
            continue
        patient = await storage.create_patient(db, data)
        created_patients += 1

        sample = SAMPLE_HANDOVERS[data["patient_id"]]
        await storage.create_handover(db, {
            "patient_id": patient.id,
            "nurser_id": nurse_id,
            "transcription": sample["transcription"],
            "isbar_report": json.dumps(sample["isbar_report"]),
            "status": HandoverStatus.COMPLETED.value,
        })
        created_handovers += 1

    return {"patients": created_patients, "handovers": created_handovers}
