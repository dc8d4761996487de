"""Custom exceptions for the transcription service."""


class PipelineError(Exception):
    """Base class for failures that end a transcription request."""

    kind = "internal"
    default_status_code = 500

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        cause: Exception | None = None,
    ):
        self.message = message
        self.status_code = status_code or self.default_status_code
        self.cause = cause
        super().__init__(message)


class ConfigurationError(PipelineError):
    """Raised when a required setting, such as the API credential, is missing."""

    kind = "configuration"

    def __init__(self, setting: str):
        self.setting = setting
        super().__init__(f"Server configuration error: {setting} is not set")


class ValidationError(PipelineError):
    """Raised when the request input is missing or unacceptable."""

    kind = "validation"
    default_status_code = 400


class PayloadTooLarge(ValidationError):
    """Raised when the audio exceeds the transcription size ceiling."""

    def __init__(self, size: int, max_bytes: int):
        self.size = size
        self.max_bytes = max_bytes
        limit_mb = max_bytes // (1024 * 1024)
        super().__init__(f"File size exceeds {limit_mb}MB limit")


class InvalidStagedUrl(ValidationError):
    """Raised when a staged URL does not point into the staging bucket."""

    def __init__(self, url: str):
        self.url = url
        super().__init__("blobUrl does not reference a staged upload")


class AuthorizationDenied(ValidationError):
    """Raised when an upload token request is malformed or not permitted."""


class UpstreamFetchError(PipelineError):
    """Raised when the staged object cannot be retrieved from storage."""

    kind = "upstream_fetch"


class StagedObjectNotFound(UpstreamFetchError):
    """Raised when the storage probe reports the staged object as absent."""

    def __init__(self, object_name: str, cause: Exception | None = None):
        self.object_name = object_name
        super().__init__(f"Staged object '{object_name}' was not found", cause=cause)


class StorageFetchFailed(UpstreamFetchError):
    """Raised when downloading the staged object does not succeed."""

    def __init__(
        self,
        object_name: str,
        upstream_status: int | None = None,
        cause: Exception | None = None,
    ):
        self.object_name = object_name
        self.upstream_status = upstream_status
        detail = f" (status {upstream_status})" if upstream_status else ""
        super().__init__(f"Failed to fetch staged audio{detail}", cause=cause)


class UpstreamTranscriptionError(PipelineError):
    """Raised when the transcription service fails or cannot be reached."""

    kind = "upstream_transcription"


TranscriptionServiceError = UpstreamTranscriptionError


class CleanupError(PipelineError):
    """Raised when a staged object cannot be removed. Never fatal to a request."""

    kind = "cleanup"


class StorageDeleteError(CleanupError):
    """Raised when the storage delete call fails."""

    def __init__(self, object_name: str, cause: Exception | None = None):
        self.object_name = object_name
        super().__init__(f"Failed to delete '{object_name}' from storage", cause=cause)
