"""MinIO implementation of the StagedStorage interface."""

from datetime import datetime, timedelta, timezone
from urllib.parse import quote, unquote, urlsplit, urlunsplit

from minio import Minio
from minio.datatypes import PostPolicy
from minio.error import S3Error

from transcribe_api.config import MinioConfig
from transcribe_api.domain import IssuedUploadToken
from transcribe_api.exceptions import (
    InvalidStagedUrl,
    PipelineError,
    StagedObjectNotFound,
    StorageDeleteError,
    StorageFetchFailed,
    UpstreamFetchError,
)
from transcribe_api.interfaces import StagedStorage
from transcribe_api.logging import setup_logging

logger = setup_logging()

_MISSING_OBJECT_CODES = {"NoSuchKey", "NoSuchObject", "ResourceNotFound"}


def _status_of(error: Exception) -> int | None:
    """Extracts the HTTP status from a MinIO or urllib3 failure, if any."""
    response = getattr(error, "response", None)
    status = getattr(response, "status", None)
    if status is None:
        status = getattr(error, "status_code", None)
    return status


class MinioStagedStorage(StagedStorage):
    """Handles staged-object operations against a MinIO bucket."""

    def __init__(self, client: Minio, config: MinioConfig):
        self._client = client
        self._bucket_name = config.bucket_name
        self._base_url = config.base_url
        self._object_prefix = config.object_prefix.strip("/")

    def presign_upload(
        self,
        object_name: str,
        content_type: str,
        max_bytes: int,
        expires_in_seconds: int,
    ) -> IssuedUploadToken:
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=expires_in_seconds)
        policy = PostPolicy(self._bucket_name, expires_at)
        policy.add_equals_condition("key", object_name)
        policy.add_equals_condition("Content-Type", content_type)
        policy.add_content_length_range_condition(1, max_bytes)

        try:
            form_data = self._client.presigned_post_policy(policy)
        except Exception as e:
            logger.exception(
                "MinIO presign failed",
                extra={"bucket_name": self._bucket_name, "object_name": object_name},
            )
            raise PipelineError("Failed to issue upload token", cause=e) from e

        fields = {key: str(value) for key, value in form_data.items()}
        fields["key"] = object_name
        fields["Content-Type"] = content_type
        return IssuedUploadToken(
            upload_url=f"{self._base_url}/{self._bucket_name}",
            form_fields=fields,
        )

    def object_url(self, object_name: str) -> str:
        return f"{self._base_url}/{self._bucket_name}/{quote(object_name)}"

    def resolve(self, url: str) -> str:
        parts = urlsplit(url.strip())
        bare_url = urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))
        bucket_url = f"{self._base_url}/{self._bucket_name}/"
        if not bare_url.startswith(bucket_url):
            raise InvalidStagedUrl(url)

        object_name = unquote(bare_url[len(bucket_url):])
        segments = object_name.split("/")
        if segments[0] != self._object_prefix or len(segments) < 2 or ".." in segments:
            raise InvalidStagedUrl(url)
        return object_name

    def stat(self, object_name: str) -> tuple[int, str | None]:
        try:
            stat = self._client.stat_object(self._bucket_name, object_name)
        except Exception as e:
            if isinstance(e, S3Error) and e.code in _MISSING_OBJECT_CODES:
                raise StagedObjectNotFound(object_name, e) from e
            raise UpstreamFetchError(
                f"Failed to probe staged object '{object_name}'",
                cause=e,
            ) from e
        return stat.size, stat.content_type

    def download(self, object_name: str) -> tuple[bytes, str | None]:
        response = None
        try:
            response = self._client.get_object(self._bucket_name, object_name)
            data = response.data
            content_type = response.headers.get("Content-Type")
        except Exception as e:
            status = _status_of(e)
            logger.exception(
                "MinIO download failed",
                extra={
                    "bucket_name": self._bucket_name,
                    "object_name": object_name,
                    "status": status,
                },
            )
            raise StorageFetchFailed(object_name, status, e) from e
        finally:
            if response is not None:
                response.close()
                response.release_conn()

        logger.info(
            "File downloaded from MinIO",
            extra={
                "bucket_name": self._bucket_name,
                "object_name": object_name,
                "size": len(data),
            },
        )
        return data, content_type

    def delete(self, object_name: str) -> None:
        try:
            self._client.remove_object(self._bucket_name, object_name)
        except Exception as e:
            raise StorageDeleteError(object_name, e) from e
        logger.info(
            "Staged object deleted from MinIO",
            extra={"bucket_name": self._bucket_name, "object_name": object_name},
        )

    def ensure_bucket_exists(self) -> None:
        if not self._client.bucket_exists(self._bucket_name):
            self._client.make_bucket(self._bucket_name)
            logger.info("Bucket created", extra={"bucket_name": self._bucket_name})
        else:
            logger.info(
                "Bucket already exists", extra={"bucket_name": self._bucket_name}
            )
