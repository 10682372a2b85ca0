import json
import os
import unittest
from datetime import datetime
from unittest.mock import AsyncMock, patch

from app.config import get_settings
from app.schemas.handover import ISBARReport, TranscriptionResult
from app.services.ai_service import ai_service
from app.services.storage_service import storage
from tests.base import ApiTestCase

REPORT = ISBARReport(
    identify="Test Patient, Room 101",
    situation="Post-op day 1",
    background="Appendectomy yesterday",
    assessment="Obs stable, pain 2/10",
    recommendation="Mobilise, continue analgesia",
)

WAV_BYTES = b"RIFF\x24\x00\x00\x00WAVEfmt "


def stored_uploads():
    upload_dir = get_settings().upload_dir
    return set(os.listdir(upload_dir)) if os.path.isdir(upload_dir) else set()


class HandoverTestCase(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.headers = self.auth_headers()
        self.patient = self.create_patient(self.headers)

    def upload(self, patient_id=None, audio=("handover.wav", WAV_BYTES, "audio/wav")):
        data = {"patientId": str(patient_id if patient_id is not None else self.patient["id"])}
        files = {"audio": audio} if audio else None
        return self.client.post("/api/handovers", data=data, files=files, headers=self.headers)

    def upload_with_ai(self, text="Patient stable overnight.", **kwargs):
        with patch.object(
            ai_service, "transcribe", new=AsyncMock(return_value=TranscriptionResult(text=text))
        ), patch.object(ai_service, "summarize", new=AsyncMock(return_value=REPORT)):
            return self.upload(**kwargs)


class HandoverApiTests(HandoverTestCase):
    def test_create_without_audio_is_400(self):
        response = self.upload(audio=None)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Audio file is required")

    def test_create_with_non_audio_file_is_400(self):
        response = self.upload(audio=("notes.txt", b"hello", "text/plain"))
        self.assertEqual(response.status_code, 400)

    def test_create_with_bad_patient_id_is_400(self):
        response = self.client.post(
            "/api/handovers",
            data={"patientId": "abc"},
            files={"audio": ("handover.wav", WAV_BYTES, "audio/wav")},
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 400)

    def test_create_returns_processing_record_and_completes(self):
        response = self.upload_with_ai()
        self.assertEqual(response.status_code, 200, response.text)
        created = response.json()
        self.assertEqual(created["status"], "processing")
        self.assertEqual(created["patientId"], self.patient["id"])
        self.assertTrue(os.path.exists(created["audioPath"]))
        self.assertTrue(created["audioPath"].endswith(".wav"))

        # TestClient runs background tasks before returning
        fetched = self.client.get(f"/api/handovers/{created['id']}", headers=self.headers).json()
        self.assertEqual(fetched["status"], "complete")
        self.assertEqual(fetched["transcription"], "Patient stable overnight.")
        self.assertEqual(json.loads(fetched["isbarReport"]), REPORT.model_dump())

    def test_missing_handover_is_404(self):
        response = self.client.get("/api/handovers/12345", headers=self.headers)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["message"], "Handover not found")

    def test_patient_with_handovers_cannot_be_deleted(self):
        created = self.upload_with_ai().json()

        response = self.client.delete(f"/api/patients/{self.patient['id']}", headers=self.headers)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json()["message"], "Cannot delete a patient with recorded handovers"
        )

        still_there = self.client.get(f"/api/patients/{self.patient['id']}", headers=self.headers)
        self.assertEqual(still_there.status_code, 200)
        for_patient = self.client.get(
            f"/api/handovers/patient/{self.patient['id']}", headers=self.headers
        ).json()
        self.assertEqual([h["id"] for h in for_patient], [created["id"]])

    def test_failed_insert_discards_stored_audio(self):
        before = stored_uploads()
        with patch.object(
            storage, "create_handover", new=AsyncMock(side_effect=RuntimeError("insert failed"))
        ):
            response = self.upload()
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["message"], "Failed to create handover")
        self.assertEqual(stored_uploads(), before)

    def test_fetch_failure_is_500(self):
        created = self.upload_with_ai().json()
        with patch.object(
            storage, "get_handover", new=AsyncMock(side_effect=RuntimeError("database unavailable"))
        ):
            response = self.client.get(f"/api/handovers/{created['id']}", headers=self.headers)
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["message"], "Failed to fetch handover")

    def test_listings(self):
        other = self.create_patient(self.headers, patientId="P200", name="Second Patient")
        first = self.upload_with_ai().json()
        second = self.upload_with_ai(patient_id=other["id"]).json()

        recent = self.client.get("/api/handovers/recent", headers=self.headers).json()
        self.assertEqual([h["id"] for h in recent], [second["id"], first["id"]])

        limited = self.client.get("/api/handovers/all", params={"limit": 1}, headers=self.headers).json()
        self.assertEqual(len(limited), 1)

        mine = self.client.get("/api/handovers/my", headers=self.headers).json()
        self.assertEqual(len(mine), 2)

        for_patient = self.client.get(
            f"/api/handovers/patient/{other['id']}", headers=self.headers
        ).json()
        self.assertEqual([h["id"] for h in for_patient], [second["id"]])

    def test_my_handovers_only_lists_own(self):
        self.upload_with_ai()
        other_headers = self.auth_headers(employee_id="N2002")
        mine = self.client.get("/api/handovers/my", headers=other_headers).json()
        self.assertEqual(mine, [])
        everyone = self.client.get("/api/handovers/all", headers=other_headers).json()
        self.assertEqual(len(everyone), 1)

    def test_dashboard_stats_and_reports(self):
        self.upload_with_ai()
        self.upload_with_ai()

        stats = self.client.get("/api/dashboard/stats", headers=self.headers).json()
        self.assertEqual(stats, {"todayHandovers": 2, "totalHandovers": 2})

        reports = self.client.get("/api/user/reports", headers=self.headers).json()
        self.assertEqual(reports["myHandoversCount"], 2)
        self.assertEqual(reports["totalHandoversCount"], 2)
        self.assertEqual(reports["totalVisits"], 1)
        self.assertEqual(reports["peakActivity"]["count"], 2)


class HandoverExportTests(HandoverTestCase):
    def test_export_csv(self):
        self.upload_with_ai(text='Said "fine", resting.\nNo pain overnight.')
        self.upload_with_ai(text="Plain update")

        response = self.client.get("/api/handovers/export", headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.headers["content-type"].startswith("text/csv"))
        self.assertIn("attachment; filename=handovers.csv", response.headers["content-disposition"])

        lines = response.text.strip("\n").split("\n")
        self.assertEqual(lines[0], "Date,Time,Patient ID,Status,Transcription")
        self.assertEqual(len(lines), 3)

        pid = self.patient["id"]
        quoted = [line for line in lines[1:] if "fine" in line][0]
        self.assertTrue(quoted.endswith(f',{pid},complete,"Said ""fine"", resting. No pain overnight."'))
        date_part, time_part = quoted.split(",")[:2]
        datetime.strptime(date_part, "%Y-%m-%d")
        datetime.strptime(time_part, "%H:%M:%S")

        plain = [line for line in lines[1:] if "Plain" in line][0]
        self.assertTrue(plain.endswith(f",{pid},complete,Plain update"))

    def test_export_is_empty_for_new_nurse(self):
        response = self.client.get("/api/handovers/export", headers=self.headers)
        self.assertEqual(response.text, "Date,Time,Patient ID,Status,Transcription\n")


if __name__ == "__main__":
    unittest.main()
