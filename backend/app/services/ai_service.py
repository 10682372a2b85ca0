"""
AI client for handover processing.

Speech-to-text goes through the OpenAI audio transcription endpoint;
ISBAR summaries are generated with a Claude model on AWS Bedrock.
Both clients are created on first use so the app starts without
credentials configured.
"""

import asyncio
import json
import os
import aiofiles
import boto3
from openai import AsyncOpenAI
from pydantic import ValidationError
from app.config import get_settings
from app.exceptions import ISBARGenerationError
from app.logging_config import get_logger
from app.schemas.handover import ISBARReport, TranscriptionResult

logger = get_logger(__name__)

ISBAR_SYSTEM = """You are an experienced charge nurse writing clinical handover notes.
Convert the nurse's verbal handover into the ISBAR format.
Return ONLY a JSON object with these string fields:
- identify: patient identity, age, location
- situation: the current problem or reason for care
- background: relevant history, diagnosis, treatment so far
- assessment: current observations, vital signs, clinical impression
- recommendation: actions, monitoring and follow-up for the next shift
Use only information from the handover and the patient record. Write "Not stated" when a section is not covered."""


def _format_patient(patient) -> str:
    fields = [
        ("Name", patient.name),
        ("Patient ID", patient.patient_id),
        ("Room", patient.room),
        ("Ward", patient.ward),
        ("Date of birth", patient.date_of_birth),
        ("Gender", patient.gender),
        ("Primary diagnosis", patient.primary_diagnosis),
        ("Attending physician", patient.attending_physician),
        ("Allergies", patient.allergies),
        ("Medications", patient.medications),
        ("Notes", patient.notes),
    ]
    return "\n".join(f"{label}: {value}" for label, value in fields if value)


class AIService:
    def __init__(self):
        settings = get_settings()
        self.transcription_model = settings.openai_transcription_model
        self.model_id = settings.aws_bedrock_model_id
        self.region = settings.aws_region
        self._openai = None
        self._bedrock = None

    @property
    def openai_client(self) -> AsyncOpenAI:
        if self._openai is None:
            self._openai = AsyncOpenAI(api_key=get_settings().openai_api_key)
        return self._openai

    @property
    def bedrock_client(self):
        if self._bedrock is None:
            settings = get_settings()
            self._bedrock = boto3.client(
                "bedrock-runtime",
                region_name=self.region,
                aws_access_key_id=settings.aws_access_key_id or None,
                aws_secret_access_key=settings.aws_secret_access_key or None,
            )
        return self._bedrock

    async def transcribe(self, audio_path: str) -> TranscriptionResult:
        async with aiofiles.open(audio_path, "rb") as f:
            content = await f.read()

        result = await self.openai_client.audio.transcriptions.create(
            model=self.transcription_model,
            file=(os.path.basename(audio_path), content),
        )
        text = result.text.strip()
        logger.info("audio_transcribed", path=audio_path, characters=len(text))
        return TranscriptionResult(text=text)

    async def generate(self, prompt: str, system: str = "", temperature: float = 0.3) -> str:
        system_blocks = [{"text": system}] if system else []
        messages = [{"role": "user", "content": [{"text": prompt}]}]

        response = await asyncio.to_thread(
            self.bedrock_client.converse,
            modelId=self.model_id,
            messages=messages,
            system=system_blocks,
            inferenceConfig={"temperature": temperature, "maxTokens": 2048},
        )
        return response["output"]["message"]["content"][0]["text"]

    async def summarize(self, transcription: str, patient) -> ISBARReport:
        prompt = (
            f"Patient record:\n{_format_patient(patient)}\n\n"
            f"Verbal handover transcription:\n{transcription}"
        )
        raw = await self.generate(prompt, system=ISBAR_SYSTEM)

        start = raw.find("{")
        end = raw.rfind("}") + 1
        if start < 0 or end <= start:
            raise ISBARGenerationError("no JSON object in model response", raw)
        try:
            return ISBARReport.model_validate(json.loads(raw[start:end]))
        except (json.JSONDecodeError, ValidationError) as e:
            raise ISBARGenerationError(str(e), raw) from e


ai_service = AIService()
