from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.logging_config import get_logger
from app.schemas.patient import PatientCreate, PatientUpdate, PatientResponse
from app.auth import get_current_user, TokenPrincipal
from app.services.storage_service import storage

router = APIRouter()

logger = get_logger(__name__)


@router.get("/search", response_model=list[PatientResponse])
async def search_patients(
    query: str = Query("", description="Search by name, patient ID or room"),
    ward: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: TokenPrincipal = Depends(get_current_user),
):
    try:
        patients = await storage.search_patients(db, query, ward, status)
    except Exception:
        logger.error("patient_search_failed", query=query, exc_info=True)
        raise HTTPException(status_code=500, detail="Search failed")
    return [PatientResponse.model_validate(p) for p in patients]


@router.get("/{patient_id}", response_model=PatientResponse)
async def get_patient(
    patient_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: TokenPrincipal = Depends(get_current_user),
):
    try:
        patient = await storage.get_patient(db, patient_id)
    except Exception:
        logger.error("patient_fetch_failed", patient_id=patient_id, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch patient")
    if not patient:
        raise HTTPException(status_code=404, detail="Patient not found")
    return PatientResponse.model_validate(patient)


@router.post("", response_model=PatientResponse)
async def create_patient(
    body: dict,
    db: AsyncSession = Depends(get_db),
    current_user: TokenPrincipal = Depends(get_current_user),
):
    try:
        data = PatientCreate.model_validate(body)
        patient = await storage.create_patient(db, data.model_dump())
    except (ValidationError, IntegrityError):
        await db.rollback()
        raise HTTPException(status_code=400, detail="Failed to create patient")
    logger.info("patient_created", patient_id=patient.patient_id)
    return PatientResponse.model_validate(patient)


@router.put("/{patient_id}", response_model=PatientResponse)
async def update_patient(
    patient_id: int,
    body: dict,
    db: AsyncSession = Depends(get_db),
    current_user: TokenPrincipal = Depends(get_current_user),
):
    try:
        data = PatientUpdate.model_validate(body)
    except ValidationError:
        raise HTTPException(status_code=400, detail="Failed to update patient")

    try:
        patient = await storage.update_patient(db, patient_id, data.model_dump(exclude_unset=True))
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=400, detail="Failed to update patient")
    except Exception:
        logger.error("patient_update_failed", patient_id=patient_id, exc_info=True)
        await db.rollback()
        raise HTTPException(status_code=500, detail="Failed to update patient")
    if not patient:
        raise HTTPException(status_code=404, detail="Patient not found")
    return PatientResponse.model_validate(patient)


@router.delete("/{patient_id}")
async def delete_patient(
    patient_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: TokenPrincipal = Depends(get_current_user),
):
    """Patients with recorded handovers are kept; their handovers reference them."""
    try:
        patient = await storage.get_patient(db, patient_id)
        handover_count = await storage.count_handovers_for_patient(db, patient_id) if patient else 0
    except Exception:
        logger.error("patient_delete_failed", patient_id=patient_id, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete patient")
    if not patient:
        raise HTTPException(status_code=404, detail="Patient not found")
    if handover_count:
        raise HTTPException(status_code=400, detail="Cannot delete a patient with recorded handovers")

    try:
        await storage.delete_patient(db, patient_id)
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=400, detail="Cannot delete a patient with recorded handovers")
    except Exception:
        logger.error("patient_delete_failed", patient_id=patient_id, exc_info=True)
        await db.rollback()
        raise HTTPException(status_code=500, detail="Failed to delete patient")
    logger.info("patient_deleted", patient_id=patient_id)
    return {"deleted": True, "id": patient_id}
