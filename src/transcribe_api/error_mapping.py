"""Mapping of pipeline outcomes and errors onto HTTP responses."""

from fastapi.responses import JSONResponse

from transcribe_api.domain import ErrorRecord, PipelineOutcome
from transcribe_api.exceptions import (
    CleanupError,
    ConfigurationError,
    PipelineError,
    UpstreamFetchError,
    UpstreamTranscriptionError,
    ValidationError,
)
from transcribe_api.response_models import ErrorResponse, TranscriptResponse

CLEANUP_FAILED_MESSAGE = (
    "Transcription succeeded, but the uploaded audio could not be removed from storage"
)

_STATUS_BY_KIND = {
    ConfigurationError.kind: 500,
    ValidationError.kind: 400,
    UpstreamFetchError.kind: 500,
    CleanupError.kind: 500,
    PipelineError.kind: 500,
}


def error_status(error: ErrorRecord) -> int:
    """Returns the HTTP status for an error record."""
    if error.kind == UpstreamTranscriptionError.kind:
        if 400 <= error.status_code < 600:
            return error.status_code
        return 500
    return _STATUS_BY_KIND.get(error.kind, 500)


def to_error_response(
    error: ErrorRecord, blob_deleted: bool | None = None
) -> JSONResponse:
    """Builds the JSON error body; never includes a stack trace."""
    body = ErrorResponse(error=error.message, blob_deleted=blob_deleted)
    return JSONResponse(
        status_code=error_status(error),
        content=body.model_dump(by_alias=True, exclude_none=True),
    )


def error_record(error: PipelineError) -> ErrorRecord:
    return ErrorRecord(
        kind=error.kind, message=error.message, status_code=error.status_code
    )


def outcome_response(outcome: PipelineOutcome) -> JSONResponse:
    """Maps a finished pipeline run onto its HTTP response."""
    blob_deleted = outcome.cleanup_performed if outcome.cleanup_attempted else None

    if outcome.error is not None:
        return to_error_response(outcome.error, blob_deleted)

    body = TranscriptResponse(
        transcript=outcome.transcript or "",
        blob_deleted=blob_deleted,
        message=CLEANUP_FAILED_MESSAGE if blob_deleted is False else None,
    )
    return JSONResponse(
        status_code=200,
        content=body.model_dump(by_alias=True, exclude_none=True),
    )
