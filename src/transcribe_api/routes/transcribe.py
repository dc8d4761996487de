"""Transcription endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile
from starlette.formparsers import MultiPartException, MultiPartParser

from transcribe_api.dependencies import ConfigDep, get_pipeline
from transcribe_api.error_mapping import outcome_response
from transcribe_api.exceptions import ValidationError
from transcribe_api.handlers import TranscriptionPipeline
from transcribe_api.response_models import LimitsResponse, StagedTranscriptionRequest

router = APIRouter(prefix="/api", tags=["transcription"])

PipelineDep = Annotated[TranscriptionPipeline, Depends(get_pipeline)]


@router.post("/transcribe")
async def transcribe(request: Request, pipeline: PipelineDep) -> JSONResponse:
    """
    Transcribes an audio recording.

    Accepts either a multipart body with a "file" field, for recordings small
    enough to pass through the request body, or a JSON body with "blobUrl"
    pointing at a staged upload.
    """
    content_type = request.headers.get("content-type", "").lower()

    if content_type.startswith("multipart/form-data"):
        # Request.form() only accepts a lowercase media type.
        try:
            form = await MultiPartParser(request.headers, request.stream()).parse()
        except MultiPartException as e:
            raise ValidationError(e.message, cause=e) from e
        try:
            upload = form.get("file")
            if not isinstance(upload, UploadFile):
                raise ValidationError("No file provided")
            data = await upload.read()
        finally:
            await form.close()
        outcome = await run_in_threadpool(
            pipeline.run_direct,
            upload.filename or "audio",
            upload.content_type,
            data,
        )
        return outcome_response(outcome)

    try:
        body = StagedTranscriptionRequest.model_validate(await request.json())
    except ValueError as e:
        raise ValidationError(
            "Expected multipart form data with a file or JSON with blobUrl", cause=e
        ) from e

    outcome = await run_in_threadpool(pipeline.run_staged, body.blob_url, body.filename)
    return outcome_response(outcome)


@router.get("/limits", response_model=LimitsResponse)
def get_limits(config: ConfigDep) -> LimitsResponse:
    """Returns the size limits used to pick the direct or staged upload path."""
    return LimitsResponse(
        max_bytes=config.limits.max_bytes,
        direct_body_limit_bytes=config.limits.direct_body_limit_bytes,
        allowed_content_types=list(config.limits.allowed_content_types),
    )
