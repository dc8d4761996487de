"""Abstract interface for staged-object storage operations."""

from abc import ABC, abstractmethod

from transcribe_api.domain.models import IssuedUploadToken


class StagedStorage(ABC):
    """Abstract base class for the object store holding staged uploads."""

    @abstractmethod
    def presign_upload(
        self,
        object_name: str,
        content_type: str,
        max_bytes: int,
        expires_in_seconds: int,
    ) -> IssuedUploadToken:
        """
        Issues a time-limited permission to upload one object.

        Args:
            object_name: The object key the client may write.
            content_type: The only content type the upload may declare.
            max_bytes: Upper bound on the uploaded object size.
            expires_in_seconds: Lifetime of the permission.

        Returns:
            The presigned upload URL and form fields.
        """

    @abstractmethod
    def object_url(self, object_name: str) -> str:
        """Returns the URL a staged object is addressed by."""

    @abstractmethod
    def resolve(self, url: str) -> str:
        """
        Maps a staged URL back onto its object name.

        Raises:
            InvalidStagedUrl: If the URL is not inside the staging bucket.
        """

    @abstractmethod
    def stat(self, object_name: str) -> tuple[int, str | None]:
        """
        Probes a staged object.

        Returns:
            Tuple of (size, content_type) as recorded by storage.

        Raises:
            StagedObjectNotFound: If storage reports the object as absent.
            UpstreamFetchError: If the probe itself fails.
        """

    @abstractmethod
    def download(self, object_name: str) -> tuple[bytes, str | None]:
        """
        Downloads a staged object.

        Returns:
            Tuple of (data, content_type) as served by storage.

        Raises:
            StorageFetchFailed: If the transfer does not succeed.
        """

    @abstractmethod
    def delete(self, object_name: str) -> None:
        """
        Removes a staged object.

        Raises:
            StorageDeleteError: If the delete call fails.
        """

    @abstractmethod
    def ensure_bucket_exists(self) -> None:
        """Ensures the staging bucket exists, creating it if necessary."""
