import asyncio
import unittest
from unittest.mock import AsyncMock, patch

from app.database import async_session
from app.exceptions import ISBARGenerationError
from app.schemas.handover import ISBARReport, TranscriptionResult
from app.services.ai_service import ai_service
from app.services.handover_service import process_handover_audio
from app.services.storage_service import storage
from tests.base import ApiTestCase

REPORT = ISBARReport(
    identify="Test Patient",
    situation="Stable",
    background="Admitted for observation",
    assessment="No concerns",
    recommendation="Routine observations",
)


class HandoverPipelineTests(ApiTestCase):
    """Runs the background pipeline directly against a stored `processing` handover."""

    def setUp(self):
        super().setUp()
        self.nurse_id = self.register()["user"]["id"]
        self.patient_pk, self.handover_id = asyncio.run(self._seed())

    async def _seed(self):
        async with async_session() as db:
            patient = await storage.create_patient(db, {"patient_id": "P900", "name": "Pipeline Patient"})
            handover = await storage.create_handover(db, {
                "patient_id": patient.id,
                "nurser_id": self.nurse_id,
                "audio_path": "/tmp/handover.wav",
                "status": "processing",
            })
            await db.commit()
            return patient.id, handover.id

    def _load(self):
        async def load():
            async with async_session() as db:
                return await storage.get_handover(db, self.handover_id)
        return asyncio.run(load())

    def _run(self, patient_id=None, transcribe=None, summarize=None):
        transcribe = transcribe or AsyncMock(return_value=TranscriptionResult(text="All good."))
        summarize = summarize or AsyncMock(return_value=REPORT)
        with patch.object(ai_service, "transcribe", new=transcribe), \
                patch.object(ai_service, "summarize", new=summarize), \
                patch.object(storage, "update_handover", wraps=storage.update_handover) as spy:
            asyncio.run(process_handover_audio(
                self.handover_id, "/tmp/handover.wav", patient_id or self.patient_pk
            ))
        return [c.args[2]["status"] for c in spy.call_args_list]

    def test_success_moves_through_statuses(self):
        statuses = self._run()
        self.assertEqual(statuses, ["transcribed", "complete"])

        handover = self._load()
        self.assertEqual(handover.status, "complete")
        self.assertEqual(handover.transcription, "All good.")
        self.assertEqual(ISBARReport.model_validate_json(handover.isbar_report), REPORT)

    def test_transcription_failure_sets_error(self):
        summarize = AsyncMock(return_value=REPORT)
        statuses = self._run(
            transcribe=AsyncMock(side_effect=RuntimeError("speech service down")),
            summarize=summarize,
        )
        self.assertEqual(statuses, ["error"])
        summarize.assert_not_awaited()

        handover = self._load()
        self.assertEqual(handover.status, "error")
        self.assertIsNone(handover.transcription)

    def test_missing_patient_sets_error(self):
        summarize = AsyncMock(return_value=REPORT)
        statuses = self._run(patient_id=424242, summarize=summarize)
        self.assertEqual(statuses, ["transcribed", "error"])
        summarize.assert_not_awaited()

        handover = self._load()
        self.assertEqual(handover.status, "error")
        # transcription was committed before the failure
        self.assertEqual(handover.transcription, "All good.")

    def test_summary_failure_sets_error(self):
        statuses = self._run(
            summarize=AsyncMock(side_effect=ISBARGenerationError("no JSON object in model response")),
        )
        self.assertEqual(statuses, ["transcribed", "error"])

        handover = self._load()
        self.assertEqual(handover.status, "error")
        self.assertIsNone(handover.isbar_report)


if __name__ == "__main__":
    unittest.main()
