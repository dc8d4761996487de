"""Orchestration of a single transcription request."""

import mimetypes

from transcribe_api.config import AppConfig
from transcribe_api.domain import (
    Deadline,
    NormalizedAudio,
    PipelineOutcome,
    PipelineState,
    TranscriptionResult,
    normalize_audio,
)
from transcribe_api.error_mapping import error_record
from transcribe_api.exceptions import (
    ConfigurationError,
    PayloadTooLarge,
    PipelineError,
    TranscriptionServiceError,
    ValidationError,
)
from transcribe_api.interfaces import StagedStorage, TranscriptionService
from transcribe_api.logging import setup_logging

from .cleanup import CleanupGuarantor, CleanupRecord
from .staged_object_fetcher import FALLBACK_CONTENT_TYPE, StagedObjectFetcher

logger = setup_logging()

_STATE_ORDER = list(PipelineState)


class TranscriptionPipeline:
    """
    Drives one request from received audio to a terminal outcome.

    Stages run strictly in order: size check, fetch, normalize, transcribe,
    cleanup. A failing stage skips straight to cleanup and the outcome carries
    the originating error. An instance serves exactly one request.
    """

    def __init__(
        self,
        config: AppConfig,
        storage: StagedStorage,
        transcription_service: TranscriptionService,
    ):
        self._config = config
        self._storage = storage
        self._transcription_service = transcription_service
        self._fetcher = StagedObjectFetcher(storage)
        self._cleanup = CleanupGuarantor(storage)
        self._state = PipelineState.RECEIVED
        self._started = False

    @property
    def state(self) -> PipelineState:
        return self._state

    def run_staged(self, blob_url: str, filename: str | None = None) -> PipelineOutcome:
        """
        Transcribes an object previously uploaded to the staging bucket.

        Once the URL resolves to a staged object, exactly one deletion is
        attempted for it, whatever happens afterwards.
        """
        self._start()
        deadline = Deadline(self._config.limits.request_timeout_seconds)
        record: CleanupRecord | None = None
        logger.info(
            "Staged transcription requested",
            extra={"blob_url": blob_url, "file_name": filename},
        )

        try:
            self._require_credential()
            if not blob_url or not blob_url.strip():
                raise ValidationError("No blobUrl provided")
            object_name = self._storage.resolve(blob_url)
            self._advance(PipelineState.SIZE_CHECKED)

            with self._cleanup.guard(object_name) as record:
                staged, data = self._fetcher.fetch(
                    blob_url, object_name, filename, deadline
                )
                self._check_size(staged.observed_byte_length)
                self._advance(PipelineState.FETCHED)

                audio = normalize_audio(
                    staged.declared_filename, staged.observed_content_type, data
                )
                self._advance(PipelineState.NORMALIZED)

                result = self._invoke(audio, deadline)
                self._advance(PipelineState.TRANSCRIBED)
        except Exception as e:
            return self._finish(
                error=self._as_pipeline_error(e), staged=True, record=record
            )

        return self._finish(result=result, staged=True, record=record)

    def run_direct(
        self, filename: str, content_type: str | None, data: bytes
    ) -> PipelineOutcome:
        """Transcribes audio that arrived in the request body."""
        self._start()
        deadline = Deadline(self._config.limits.request_timeout_seconds)
        logger.info(
            "Direct transcription requested",
            extra={"file_name": filename, "size": len(data)},
        )

        try:
            self._require_credential()
            if not data:
                raise ValidationError("No file provided")
            self._check_size(len(data))
            self._advance(PipelineState.SIZE_CHECKED)
            self._advance(PipelineState.FETCHED)

            content_type = (
                content_type
                or mimetypes.guess_type(filename)[0]
                or FALLBACK_CONTENT_TYPE
            )
            audio = normalize_audio(filename, content_type, data)
            self._advance(PipelineState.NORMALIZED)

            result = self._invoke(audio, deadline)
            self._advance(PipelineState.TRANSCRIBED)
        except Exception as e:
            return self._finish(error=self._as_pipeline_error(e), staged=False)

        return self._finish(result=result, staged=False)

    def _start(self) -> None:
        if self._started:
            raise RuntimeError("A TranscriptionPipeline handles a single request")
        self._started = True

    def _advance(self, state: PipelineState) -> None:
        if _STATE_ORDER.index(state) <= _STATE_ORDER.index(self._state):
            raise RuntimeError(
                f"Illegal transition {self._state.value} -> {state.value}"
            )
        self._state = state

    def _require_credential(self) -> None:
        if not self._config.assemblyai.api_key:
            raise ConfigurationError("ASSEMBLYAI_API_KEY")

    def _check_size(self, size: int) -> None:
        if size > self._config.limits.max_bytes:
            raise PayloadTooLarge(size, self._config.limits.max_bytes)

    def _invoke(
        self, audio: NormalizedAudio, deadline: Deadline
    ) -> TranscriptionResult:
        if deadline.expired:
            raise TranscriptionServiceError("Transcription timed out")
        logger.info(
            "Invoking transcription",
            extra={
                "file_name": audio.filename,
                "content_type": audio.content_type,
                "size": len(audio.data),
                "language": self._config.assemblyai.language_code,
            },
        )
        return self._transcription_service.transcribe(
            audio, timeout=deadline.remaining()
        )

    @staticmethod
    def _as_pipeline_error(error: Exception) -> PipelineError:
        if isinstance(error, PipelineError):
            return error
        logger.exception("Unexpected pipeline failure")
        return PipelineError("Failed to transcribe audio", cause=error)

    def _finish(
        self,
        *,
        staged: bool,
        result: TranscriptionResult | None = None,
        error: PipelineError | None = None,
        record: CleanupRecord | None = None,
    ) -> PipelineOutcome:
        self._advance(PipelineState.CLEANED_UP)
        self._advance(PipelineState.DONE)

        outcome = PipelineOutcome(
            transcript=result.text if result else None,
            staged=staged,
            cleanup_attempted=bool(record and record.attempted),
            cleanup_performed=bool(record and record.deleted),
            error=error_record(error) if error else None,
        )

        log_extra = {
            "staged": staged,
            "cleanup_attempted": outcome.cleanup_attempted,
            "cleanup_performed": outcome.cleanup_performed,
        }
        if error:
            logger.warning(
                "Transcription request failed",
                extra={**log_extra, "error_kind": error.kind, "error": error.message},
            )
        else:
            logger.info("Transcription request completed", extra=log_extra)
        return outcome
