"""Guaranteed removal of staged objects."""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from transcribe_api.exceptions import CleanupError, StorageDeleteError
from transcribe_api.interfaces import StagedStorage
from transcribe_api.logging import setup_logging

logger = setup_logging()


@dataclass
class CleanupRecord:
    """What happened to a staged object once the pipeline let go of it."""

    object_name: str
    attempted: bool = False
    deleted: bool = False
    error: CleanupError | None = None


class CleanupGuarantor:
    """Deletes a staged object exactly once on every exit path."""

    def __init__(self, storage: StagedStorage):
        self._storage = storage

    @contextmanager
    def guard(self, object_name: str) -> Iterator[CleanupRecord]:
        """
        Holds a staged object for the duration of the block, then deletes it.

        The deletion runs whether the block returns or raises. A failed
        deletion is logged and recorded on the yielded record; it never
        replaces the block's own exception or result.
        """
        record = CleanupRecord(object_name=object_name)
        try:
            yield record
        finally:
            self._delete(record)

    def _delete(self, record: CleanupRecord) -> None:
        record.attempted = True
        try:
            self._storage.delete(record.object_name)
        except CleanupError as e:
            error = e
        except Exception as e:
            error = StorageDeleteError(record.object_name, e)
        else:
            record.deleted = True
            return

        record.error = error
        logger.error(
            "Staged object could not be deleted",
            extra={
                "object_name": record.object_name,
                "error": str(error.cause or error),
            },
        )
