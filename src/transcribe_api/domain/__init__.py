"""Domain layer exports."""

from .models import (
    Deadline,
    ErrorRecord,
    IssuedUploadToken,
    NormalizedAudio,
    PipelineOutcome,
    PipelineState,
    StagedObject,
    TranscriptionResult,
    UploadAuthorization,
    UploadTokenRequest,
)
from .normalizer import normalize_audio, normalize_name

__all__ = [
    "Deadline",
    "ErrorRecord",
    "IssuedUploadToken",
    "NormalizedAudio",
    "PipelineOutcome",
    "PipelineState",
    "StagedObject",
    "TranscriptionResult",
    "UploadAuthorization",
    "UploadTokenRequest",
    "normalize_audio",
    "normalize_name",
]
