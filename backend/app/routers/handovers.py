from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.auth import get_current_user, TokenPrincipal
from app.exceptions import AudioUploadError
from app.logging_config import get_logger
from app.models.handover import HandoverStatus
from app.schemas.handover import HandoverResponse
from app.services.audio_service import audio_service
from app.services.handover_service import export_csv, process_handover_audio
from app.services.storage_service import storage

router = APIRouter()

logger = get_logger(__name__)


@router.get("/recent", response_model=list[HandoverResponse])
async def recent_handovers(
    limit: int = Query(10, ge=1, le=1000),
    db: AsyncSession = Depends(get_db),
    current_user: TokenPrincipal = Depends(get_current_user),
):
    try:
        handovers = await storage.get_recent_handovers(db, limit)
    except Exception:
        logger.error("recent_handovers_failed", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch handovers")
    return [HandoverResponse.model_validate(h) for h in handovers]


@router.get("/all", response_model=list[HandoverResponse])
async def all_handovers(
    limit: int = Query(50, ge=1, le=1000),
    db: AsyncSession = Depends(get_db),
    current_user: TokenPrincipal = Depends(get_current_user),
):
    try:
        handovers = await storage.get_recent_handovers(db, limit)
    except Exception:
        logger.error("all_handovers_failed", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch all handovers")
    return [HandoverResponse.model_validate(h) for h in handovers]


@router.get("/my", response_model=list[HandoverResponse])
async def my_handovers(
    db: AsyncSession = Depends(get_db),
    current_user: TokenPrincipal = Depends(get_current_user),
):
    try:
        handovers = await storage.get_handovers_by_nurse(db, current_user.id)
    except Exception:
        logger.error("my_handovers_failed", nurse_id=current_user.id, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch my handovers")
    return [HandoverResponse.model_validate(h) for h in handovers]


@router.get("/export")
async def export_handovers(
    db: AsyncSession = Depends(get_db),
    current_user: TokenPrincipal = Depends(get_current_user),
):
    try:
        handovers = await storage.get_handovers_by_nurse(db, current_user.id)
        content = export_csv(handovers)
    except Exception:
        logger.error("handover_export_failed", nurse_id=current_user.id, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to export handovers")
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=handovers.csv"},
    )


@router.get("/patient/{patient_id}", response_model=list[HandoverResponse])
async def patient_handovers(
    patient_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: TokenPrincipal = Depends(get_current_user),
):
    try:
        handovers = await storage.get_handovers_by_patient(db, patient_id)
    except Exception:
        logger.error("patient_handovers_failed", patient_id=patient_id, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch patient handovers")
    return [HandoverResponse.model_validate(h) for h in handovers]


@router.post("", response_model=HandoverResponse)
async def create_handover(
    background_tasks: BackgroundTasks,
    audio: Optional[UploadFile] = File(None),
    patient_id: Optional[str] = Form(None, alias="patientId"),
    db: AsyncSession = Depends(get_db),
    current_user: TokenPrincipal = Depends(get_current_user),
):
    """
    Multipart upload of a recorded handover. The record is stored as
    `processing` and transcription + ISBAR generation run after the response.
    """
    if audio is None:
        raise HTTPException(status_code=400, detail="Audio file is required")
    try:
        patient_pk = int(patient_id)
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="Valid patient ID is required")

    try:
        audio_path = await audio_service.save_upload(audio)
    except AudioUploadError as e:
        raise HTTPException(status_code=400, detail=e.reason)

    try:
        handover = await storage.create_handover(db, {
            "patient_id": patient_pk,
            "nurser_id": current_user.id,
            "audio_path": audio_path,
            "status": HandoverStatus.PROCESSING.value,
        })
        # the pipeline reads this row from its own session
        await db.commit()
    except Exception:
        logger.error("handover_create_failed", patient_id=patient_pk, exc_info=True)
        await db.rollback()
        audio_service.discard(audio_path)
        raise HTTPException(status_code=500, detail="Failed to create handover")

    logger.info("handover_created", handover_id=handover.id, patient_id=patient_pk)
    background_tasks.add_task(process_handover_audio, handover.id, audio_path, patient_pk)
    return HandoverResponse.model_validate(handover)


@router.get("/{handover_id}", response_model=HandoverResponse)
async def get_handover(
    handover_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: TokenPrincipal = Depends(get_current_user),
):
    try:
        handover = await storage.get_handover(db, handover_id)
    except Exception:
        logger.error("handover_fetch_failed", handover_id=handover_id, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch handover")
    if not handover:
        raise HTTPException(status_code=404, detail="Handover not found")
    return HandoverResponse.model_validate(handover)
