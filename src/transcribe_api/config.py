"""Application configuration loaded from environment variables."""

import os

from pydantic import BaseModel, computed_field

MAX_UPLOAD_BYTES = 25 * 1024 * 1024

DEFAULT_ALLOWED_CONTENT_TYPES = (
    "audio/opus",
    "audio/mpeg",
    "audio/mp3",
    "audio/wav",
    "audio/mp4",
    "audio/m4a",
    "audio/ogg",
    "audio/webm",
    "audio/*",
)


class MinioConfig(BaseModel, frozen=True):
    """MinIO connection configuration for the staging bucket."""

    endpoint: str
    user: str
    password: str
    bucket_name: str = "transcription-staging"
    secure: bool = False
    public_url: str | None = None
    object_prefix: str = "staging"

    @computed_field
    @property
    def base_url(self) -> str:
        """Returns the URL prefix under which staged objects are addressed."""
        if self.public_url:
            return self.public_url.rstrip("/")
        scheme = "https" if self.secure else "http"
        return f"{scheme}://{self.endpoint}"


class AssemblyAIConfig(BaseModel, frozen=True):
    """AssemblyAI API configuration."""

    api_key: str
    language_code: str = "de"


class LimitsConfig(BaseModel, frozen=True):
    """Size ceilings and time budgets for a single request."""

    max_bytes: int = MAX_UPLOAD_BYTES
    direct_body_limit_bytes: int = 4_500_000
    request_timeout_seconds: float = 300.0
    storage_timeout_seconds: float = 30.0
    upload_token_ttl_seconds: int = 600
    allowed_content_types: tuple[str, ...] = DEFAULT_ALLOWED_CONTENT_TYPES


class AppConfig(BaseModel, frozen=True):
    """Root application configuration."""

    minio: MinioConfig
    assemblyai: AssemblyAIConfig
    limits: LimitsConfig = LimitsConfig()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes"}


def load_config() -> AppConfig:
    """Loads configuration from environment variables."""
    return AppConfig(
        minio=MinioConfig(
            endpoint=os.getenv("MINIO_ENDPOINT", "minio:9000"),
            user=os.getenv("MINIO_USER", ""),
            password=os.getenv("MINIO_PASSWORD", ""),
            bucket_name=os.getenv("MINIO_BUCKET", "transcription-staging"),
            secure=_env_flag("MINIO_SECURE"),
            public_url=os.getenv("MINIO_PUBLIC_URL") or None,
        ),
        assemblyai=AssemblyAIConfig(
            api_key=os.getenv("ASSEMBLYAI_API_KEY", ""),
            language_code=os.getenv("TRANSCRIPTION_LANGUAGE", "de"),
        ),
        limits=LimitsConfig(
            max_bytes=int(os.getenv("MAX_UPLOAD_BYTES", str(MAX_UPLOAD_BYTES))),
            direct_body_limit_bytes=int(
                os.getenv("DIRECT_BODY_LIMIT_BYTES", "4500000")
            ),
            request_timeout_seconds=float(
                os.getenv("REQUEST_TIMEOUT_SECONDS", "300")
            ),
            storage_timeout_seconds=float(
                os.getenv("STORAGE_TIMEOUT_SECONDS", "30")
            ),
            upload_token_ttl_seconds=int(
                os.getenv("UPLOAD_TOKEN_TTL_SECONDS", "600")
            ),
        ),
    )
