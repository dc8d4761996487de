"""Request handlers composing domain logic and infrastructure."""

from .cleanup import CleanupGuarantor, CleanupRecord
from .staged_object_fetcher import StagedObjectFetcher
from .transcription_pipeline import TranscriptionPipeline
from .upload_authorizer import UploadAuthorizer, content_type_allowed

__all__ = [
    "CleanupGuarantor",
    "CleanupRecord",
    "StagedObjectFetcher",
    "TranscriptionPipeline",
    "UploadAuthorizer",
    "content_type_allowed",
]
