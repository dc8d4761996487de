"""Request and response models for the transcription API."""

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class StagedTranscriptionRequest(_CamelModel):
    """JSON body for transcribing a staged upload."""

    blob_url: str = Field(alias="blobUrl")
    filename: str | None = None


class TranscriptResponse(_CamelModel):
    """Returned after a successful transcription."""

    transcript: str
    blob_deleted: bool | None = Field(default=None, alias="blobDeleted")
    message: str | None = None


class ErrorResponse(_CamelModel):
    """Returned whenever a request fails."""

    error: str
    blob_deleted: bool | None = Field(default=None, alias="blobDeleted")


class UploadTokenResponse(_CamelModel):
    """Returned for an accepted upload token request."""

    type: str = "blob.generate-client-token"
    upload_url: str = Field(alias="uploadUrl")
    form_fields: dict[str, str] = Field(alias="fields")
    object_url: str = Field(alias="objectUrl")
    allowed_content_types: list[str] = Field(alias="allowedContentTypes")
    maximum_size_in_bytes: int = Field(alias="maximumSizeInBytes")


class UploadCompletedResponse(_CamelModel):
    """Acknowledges an upload completion notice."""

    type: str = "blob.upload-completed"
    response: str = "ok"


class LimitsResponse(_CamelModel):
    """Size limits clients use to choose the direct or staged path."""

    max_bytes: int = Field(alias="maxBytes")
    direct_body_limit_bytes: int = Field(alias="directBodyLimitBytes")
    allowed_content_types: list[str] = Field(alias="allowedContentTypes")
