"""FastAPI dependency injection configuration."""

from functools import lru_cache
from typing import Annotated

import assemblyai as aai
import urllib3
from fastapi import Depends
from minio import Minio

from transcribe_api.config import AppConfig, load_config
from transcribe_api.exceptions import ConfigurationError
from transcribe_api.handlers import TranscriptionPipeline, UploadAuthorizer
from transcribe_api.infrastructure import AssemblyAITranscriber, MinioStagedStorage
from transcribe_api.interfaces import StagedStorage, TranscriptionService


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Returns the process-wide configuration, read once from the environment."""
    return load_config()


@lru_cache(maxsize=1)
def _storage() -> MinioStagedStorage:
    config = get_config()
    timeout = config.limits.storage_timeout_seconds
    http_client = urllib3.PoolManager(
        timeout=urllib3.Timeout(connect=timeout, read=timeout),
        retries=False,
    )
    client = Minio(
        endpoint=config.minio.endpoint,
        access_key=config.minio.user,
        secret_key=config.minio.password,
        secure=config.minio.secure,
        http_client=http_client,
    )
    return MinioStagedStorage(client, config.minio)


@lru_cache(maxsize=1)
def _transcription_service() -> AssemblyAITranscriber:
    config = get_config()
    if not config.assemblyai.api_key:
        raise ConfigurationError("ASSEMBLYAI_API_KEY")
    aai.settings.api_key = config.assemblyai.api_key
    aai.settings.http_timeout = config.limits.request_timeout_seconds
    aai_config = aai.TranscriptionConfig(language_code=config.assemblyai.language_code)
    return AssemblyAITranscriber(aai.Transcriber(config=aai_config))


def get_storage() -> StagedStorage:
    """Returns the configured staging storage client."""
    return _storage()


def get_transcription_service() -> TranscriptionService:
    """Returns the configured transcription service."""
    return _transcription_service()


ConfigDep = Annotated[AppConfig, Depends(get_config)]
StorageDep = Annotated[StagedStorage, Depends(get_storage)]
TranscriptionServiceDep = Annotated[
    TranscriptionService, Depends(get_transcription_service)
]


def get_pipeline(
    config: ConfigDep,
    storage: StorageDep,
    transcription_service: TranscriptionServiceDep,
) -> TranscriptionPipeline:
    """Returns a fresh pipeline; each request gets its own instance."""
    return TranscriptionPipeline(config, storage, transcription_service)


def get_upload_authorizer(config: ConfigDep, storage: StorageDep) -> UploadAuthorizer:
    """Returns an upload authorizer bound to the staging bucket."""
    return UploadAuthorizer(storage, config.limits, config.minio.object_prefix)
