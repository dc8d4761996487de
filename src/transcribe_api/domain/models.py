"""Domain models for the transcription pipeline."""

import time
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class PipelineState(str, Enum):
    """Stages of one pipeline run, in the only order they may occur."""

    RECEIVED = "received"
    SIZE_CHECKED = "size_checked"
    FETCHED = "fetched"
    NORMALIZED = "normalized"
    TRANSCRIBED = "transcribed"
    CLEANED_UP = "cleaned_up"
    DONE = "done"


class UploadTokenRequest(BaseModel):
    """Fields of the upload handshake payload used to decide on a token."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    pathname: str = Field(min_length=1)
    content_type: str | None = Field(default=None, alias="contentType")
    size: int | None = Field(default=None, ge=0)


class IssuedUploadToken(BaseModel, frozen=True):
    """Presigned POST policy letting a client write one object to storage."""

    upload_url: str
    form_fields: dict[str, str]


class UploadAuthorization(BaseModel, frozen=True):
    """Scoped, time-limited permission to upload one object."""

    allowed_content_types: tuple[str, ...]
    max_bytes: int
    issued_token: IssuedUploadToken
    object_name: str
    object_url: str


class StagedObject(BaseModel, frozen=True):
    """An uploaded object as observed by storage."""

    url: str
    declared_filename: str
    observed_content_type: str
    observed_byte_length: int


class NormalizedAudio(BaseModel, frozen=True):
    """Audio payload with filename and content type the transcriber accepts."""

    filename: str
    content_type: str
    data: bytes = Field(repr=False)


class TranscriptionResult(BaseModel, frozen=True):
    """Result of a transcription call."""

    text: str


class ErrorRecord(BaseModel, frozen=True):
    """Failure carried by a pipeline outcome."""

    kind: str
    message: str
    status_code: int


class PipelineOutcome(BaseModel, frozen=True):
    """Terminal value of one pipeline run."""

    transcript: str | None = None
    staged: bool = False
    cleanup_attempted: bool = False
    cleanup_performed: bool = False
    error: ErrorRecord | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


class Deadline:
    """Wall-clock budget for one request, measured on the monotonic clock."""

    def __init__(self, seconds: float, clock=time.monotonic):
        self._clock = clock
        self._expires_at = clock() + seconds

    def remaining(self) -> float:
        return max(0.0, self._expires_at - self._clock())

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0.0
