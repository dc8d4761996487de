"""Abstract interfaces for infrastructure dependencies."""

from .storage import StagedStorage
from .transcription_service import TranscriptionService

__all__ = ["StagedStorage", "TranscriptionService"]
