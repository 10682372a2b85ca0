import csv
import io
from collections import Counter
from datetime import datetime, timezone
from app.database import async_session
from app.exceptions import PatientNotFoundError
from app.logging_config import get_logger
from app.models.handover import HandoverStatus
from app.services.ai_service import ai_service
from app.services.storage_service import storage

logger = get_logger(__name__)

CSV_HEADER = ["Date", "Time", "Patient ID", "Status", "Transcription"]


async def process_handover_audio(handover_id: int, audio_path: str, patient_id: int) -> None:
    """
    Background pipeline run after a handover upload:
    transcribe -> store transcription -> load patient -> ISBAR summary -> store report.

    Any failure marks the handover as `error`. Nothing is raised to the caller,
    the HTTP response has already been sent.
    """
    log = logger.bind(handover_id=handover_id, patient_id=patient_id)
    async with async_session() as db:
        try:
            transcription = await ai_service.transcribe(audio_path)

            await storage.update_handover(db, handover_id, {
                "transcription": transcription.text,
                "status": HandoverStatus.TRANSCRIBED.value,
            })
            await db.commit()
            log.info("handover_transcribed")

            patient = await storage.get_patient(db, patient_id)
            if not patient:
                raise PatientNotFoundError(patient_id)

            report = await ai_service.summarize(transcription.text, patient)

            await storage.update_handover(db, handover_id, {
                "isbar_report": report.model_dump_json(),
                "status": HandoverStatus.COMPLETE.value,
            })
            await db.commit()
            log.info("handover_complete")

        except Exception:
            log.error("handover_processing_failed", exc_info=True)
            await db.rollback()
            await storage.update_handover(db, handover_id, {"status": HandoverStatus.ERROR.value})
            await db.commit()


def export_csv(handovers) -> str:
    """One CSV line per handover. Newlines in transcriptions are flattened."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for h in handovers:
        created = h.created_at or datetime.now(timezone.utc)
        transcription = " ".join((h.transcription or "").split())
        writer.writerow([
            created.strftime("%Y-%m-%d"),
            created.strftime("%H:%M:%S"),
            h.patient_id,
            h.status,
            transcription,
        ])
    return buf.getvalue()


def peak_activity(timestamps) -> dict:
    """Hour of day with the most handovers recorded."""
    counts = Counter(ts.hour for ts in timestamps)
    if not counts:
        return {"hour": None, "count": 0}
    hour, count = max(counts.items(), key=lambda item: (item[1], -item[0]))
    return {"hour": hour, "count": count}


def is_today(ts) -> bool:
    if ts is None:
        return False
    return ts.date() == datetime.now(timezone.utc).date()
