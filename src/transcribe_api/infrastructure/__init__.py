"""Concrete implementations of infrastructure interfaces."""

from .assemblyai_transcriber import AssemblyAITranscriber
from .minio_storage import MinioStagedStorage

__all__ = ["AssemblyAITranscriber", "MinioStagedStorage"]
