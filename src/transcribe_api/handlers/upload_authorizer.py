"""Authorization of direct-to-storage uploads."""

import mimetypes
import posixpath
import uuid
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from transcribe_api.config import LimitsConfig
from transcribe_api.domain import UploadAuthorization, UploadTokenRequest
from transcribe_api.exceptions import AuthorizationDenied
from transcribe_api.interfaces import StagedStorage
from transcribe_api.logging import setup_logging

logger = setup_logging()


def content_type_allowed(content_type: str, allowed: tuple[str, ...]) -> bool:
    """Matches a content type against an allow-list supporting "type/*" entries."""
    normalized = content_type.split(";", 1)[0].strip().lower()
    for entry in allowed:
        entry = entry.lower()
        if entry.endswith("/*"):
            prefix = entry[:-1]
            if normalized.startswith(prefix) and normalized != prefix:
                return True
        elif normalized == entry:
            return True
    return False


class UploadAuthorizer:
    """Decides on upload token requests and issues scoped upload permissions."""

    def __init__(
        self, storage: StagedStorage, limits: LimitsConfig, object_prefix: str
    ):
        self._storage = storage
        self._limits = limits
        self._object_prefix = object_prefix.strip("/")

    def authorize(self, payload: Any) -> UploadAuthorization:
        """
        Issues an upload authorization for a token request payload.

        Args:
            payload: The "payload" member of the upload handshake, as sent.

        Returns:
            UploadAuthorization bound to one object key and content type.

        Raises:
            AuthorizationDenied: If the payload is malformed, the content type
                is not allowed, or the declared size exceeds the ceiling.
        """
        try:
            request = UploadTokenRequest.model_validate(payload)
        except PydanticValidationError as e:
            raise AuthorizationDenied("Invalid upload token request", cause=e) from e

        filename = posixpath.basename(request.pathname.replace("\\", "/"))
        if not filename:
            raise AuthorizationDenied("Upload pathname has no filename")

        content_type = request.content_type or mimetypes.guess_type(filename)[0]
        if not content_type:
            raise AuthorizationDenied(f"Cannot determine content type of '{filename}'")

        if not content_type_allowed(content_type, self._limits.allowed_content_types):
            raise AuthorizationDenied(f"Content type '{content_type}' is not allowed")

        if request.size is not None and request.size > self._limits.max_bytes:
            limit_mb = self._limits.max_bytes // (1024 * 1024)
            raise AuthorizationDenied(f"File size exceeds {limit_mb}MB limit")

        object_name = f"{self._object_prefix}/{uuid.uuid4()}/{filename}"
        token = self._storage.presign_upload(
            object_name=object_name,
            content_type=content_type,
            max_bytes=self._limits.max_bytes,
            expires_in_seconds=self._limits.upload_token_ttl_seconds,
        )

        logger.info(
            "Upload token issued",
            extra={
                "object_name": object_name,
                "content_type": content_type,
                "declared_size": request.size,
            },
        )

        return UploadAuthorization(
            allowed_content_types=self._limits.allowed_content_types,
            max_bytes=self._limits.max_bytes,
            issued_token=token,
            object_name=object_name,
            object_url=self._storage.object_url(object_name),
        )
