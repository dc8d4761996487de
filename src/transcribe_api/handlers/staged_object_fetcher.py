"""Retrieval of staged uploads from storage."""

import mimetypes
import posixpath

from transcribe_api.domain import Deadline, StagedObject
from transcribe_api.exceptions import (
    StagedObjectNotFound,
    StorageFetchFailed,
    UpstreamFetchError,
)
from transcribe_api.interfaces import StagedStorage
from transcribe_api.logging import setup_logging

logger = setup_logging()

FALLBACK_CONTENT_TYPE = "application/octet-stream"


class StagedObjectFetcher:
    """Downloads a staged object and reports what storage says about it."""

    def __init__(self, storage: StagedStorage):
        self._storage = storage

    def fetch(
        self,
        url: str,
        object_name: str,
        declared_filename: str | None,
        deadline: Deadline,
    ) -> tuple[StagedObject, bytes]:
        """
        Fetches a staged object.

        The metadata probe is advisory: a probe reporting the object as
        missing is logged and the download is attempted regardless, since
        only the download's own result is authoritative.

        Args:
            url: The staged URL as sent by the client.
            object_name: The object name the URL resolves to.
            declared_filename: Filename sent by the client, if any.
            deadline: Budget for the whole request.

        Returns:
            Tuple of (StagedObject, data), with the length measured on the
            downloaded bytes.

        Raises:
            StorageFetchFailed: If the download fails or the deadline passed.
        """
        self._probe(object_name)

        if deadline.expired:
            raise StorageFetchFailed(object_name)

        data, content_type = self._storage.download(object_name)

        filename = declared_filename or posixpath.basename(object_name)
        observed_type = (
            content_type or mimetypes.guess_type(filename)[0] or FALLBACK_CONTENT_TYPE
        )
        staged = StagedObject(
            url=url,
            declared_filename=filename,
            observed_content_type=observed_type,
            observed_byte_length=len(data),
        )
        logger.info(
            "Staged object fetched",
            extra={
                "object_name": object_name,
                "size": staged.observed_byte_length,
                "content_type": staged.observed_content_type,
            },
        )
        return staged, data

    def _probe(self, object_name: str) -> None:
        try:
            size, content_type = self._storage.stat(object_name)
        except StagedObjectNotFound:
            logger.warning(
                "Staged object probe reported it missing, downloading anyway",
                extra={"object_name": object_name},
            )
        except UpstreamFetchError as e:
            logger.warning(
                "Staged object probe failed, downloading anyway",
                extra={"object_name": object_name, "error": str(e.cause or e)},
            )
        else:
            logger.info(
                "Staged object probed",
                extra={
                    "object_name": object_name,
                    "size": size,
                    "content_type": content_type,
                },
            )
