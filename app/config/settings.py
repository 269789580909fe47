import tempfile

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class GeminiConfig(BaseSettings):
    """Google AI (Gemini) file service and model configuration."""

    api_key: SecretStr = Field(
        default=SecretStr(""),
        validation_alias="GOOGLE_AI_API_KEY",
    )
    model: str = Field(default="gemini-1.5-flash", validation_alias="GEMINI_MODEL")
    poll_interval_seconds: float = Field(
        default=10.0,
        validation_alias="GEMINI_POLL_INTERVAL_SECONDS",
        ge=0.0,
    )
    poll_max_attempts: int = Field(
        default=60,
        validation_alias="GEMINI_POLL_MAX_ATTEMPTS",
        ge=1,
    )
    instruction: str = "transcribe the given audio file"

    model_config = SettingsConfigDict(
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class UploadConfig(BaseSettings):
    """Multipart upload limits and temporary storage."""

    dir: str = Field(default_factory=tempfile.gettempdir)
    transcribe_max_bytes: int = Field(default=10 * 1024 * 1024, ge=1)
    translate_max_bytes: int = Field(default=50 * 1024 * 1024, ge=1)
    chunk_size: int = Field(default=1024 * 1024, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="UPLOAD_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "Audio Transcription Gateway"
    app_version: str = "1.0.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    log_file: str = "logs/app.log"
    pipeline_log_file: str = "logs/audio_pipeline.log"

    ffmpeg_binary: str = "ffmpeg"
    max_concurrent_jobs: int = Field(default=4, ge=1)
    admission_timeout_seconds: float = Field(default=30.0, ge=0.0)
    expose_error_details: bool = False

    # Gemini
    gemini: GeminiConfig = Field(default_factory=GeminiConfig)

    # Uploads
    upload: UploadConfig = Field(default_factory=UploadConfig)

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]
    cors_allow_credentials: bool = False
    cors_allow_methods: list[str] = ["GET", "POST", "OPTIONS"]
    cors_allow_headers: list[str] = ["Content-Type"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings = Settings()
