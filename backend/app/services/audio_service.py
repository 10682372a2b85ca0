import os
import uuid
import aiofiles
from fastapi import UploadFile
from app.config import get_settings
from app.exceptions import AudioUploadError
from app.logging_config import get_logger

logger = get_logger(__name__)


class AudioService:
    async def save_upload(self, file: UploadFile) -> str:
        """Validate an uploaded handover recording and store it. Returns the stored path."""
        settings = get_settings()
        filename = file.filename or ""
        ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
        content_type = (file.content_type or "").lower()

        if not content_type.startswith("audio/") and ext not in settings.allowed_audio_extensions:
            raise AudioUploadError("Only audio files are allowed")

        content = await file.read()
        if not content:
            raise AudioUploadError("Audio file is empty")
        if len(content) > settings.max_audio_size_mb * 1024 * 1024:
            raise AudioUploadError(f"Audio file exceeds {settings.max_audio_size_mb} MB")

        os.makedirs(settings.upload_dir, exist_ok=True)
        stored_name = f"{uuid.uuid4().hex}.{ext}" if ext else uuid.uuid4().hex
        file_path = os.path.join(settings.upload_dir, stored_name)

        async with aiofiles.open(file_path, "wb") as f:
            await f.write(content)

        logger.info("audio_saved", path=file_path, size=len(content), original_name=filename)
        return file_path

    def discard(self, file_path: str) -> None:
        """Remove a stored recording whose handover record was never written."""
        if file_path and os.path.exists(file_path):
            try:
                os.remove(file_path)
                logger.info("audio_discarded", path=file_path)
            except OSError:
                logger.error("audio_discard_failed", path=file_path, exc_info=True)


audio_service = AudioService()
