from pydantic_settings import BaseSettings
from pydantic import Field
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings."""

    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")

    # Database
    database_url: str = Field(default="sqlite+aiosqlite:///./handover.db")

    # JWT
    jwt_secret_key: str = Field(default="your-secret-key")
    jwt_expire_hours: int = Field(default=24)

    # OpenAI speech-to-text
    openai_api_key: str = Field(default="")
    openai_transcription_model: str = Field(default="whisper-1")

    # AWS Bedrock (ISBAR summaries)
    aws_access_key_id: str = Field(default="")
    aws_secret_access_key: str = Field(default="")
    aws_region: str = Field(default="us-east-1")
    aws_bedrock_model_id: str = Field(
        default="us.anthropic.claude-sonnet-4-5-20250929-v1:0",
    )

    # Audio uploads
    upload_dir: str = Field(default="uploads")
    max_audio_size_mb: int = Field(default=25)
    allowed_audio_extensions: list[str] = Field(
        default=["mp3", "mp4", "m4a", "mpeg", "mpga", "wav", "webm", "ogg"]
    )

    cors_origins: list[str] = Field(default=["*"])

    # Sample data endpoint, development only
    enable_init_data: bool = Field(default=True)

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
