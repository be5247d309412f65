"""Custom storage backend for committed assets."""

import logging
import os
from collections.abc import Iterator
from pathlib import Path
from typing import Final, final, override

from django.core.files.storage import FileSystemStorage, default_storage

_CHUNK_SIZE: Final = 64 * 1024

logger = logging.getLogger(__name__)


@final
class FileStorage(FileSystemStorage):
    """Local filesystem storage for library assets.

    Extends Django's FileSystemStorage with:
    - Promotion of staged uploads that never overwrites (link, then unlink)
    - Rollback of promoted files whose record insert failed
    - Byte-range reads for partial content delivery
    - Logged deletes
    """

    @override
    def delete(self, name: str) -> None:
        """Delete file with error handling and logging.

        A file that is already gone is not an error.

        Args:
            name: Storage path of file to delete.

        Raises:
            OSError: If the file exists but cannot be removed.
        """
        try:
            logger.info('Deleting file from storage: %s', name)
            super().delete(name)
            logger.info('Successfully deleted file: %s', name)
        except OSError:
            logger.exception('Failed to delete file from storage: %s', name)
            raise

    def relocate(self, source: Path, name: str) -> str:
        """Move a file from outside storage to ``name`` without copying.

        The file is hard-linked at the destination, then the source link
        is dropped. Linking fails atomically when the destination exists,
        so a concurrent commit can never be overwritten. The source must
        be on the same filesystem as the storage root; cross-device moves
        fail instead of degrading to copy+delete.

        Args:
            source: Absolute path of the file to promote.
            name: Destination storage path.

        Returns:
            The destination storage path.

        Raises:
            FileExistsError: If the destination is already taken.
            OSError: If the move fails (permission, disk, cross-device).
        """
        destination = Path(self.path(name))
        try:
            logger.info('Relocating file: %s -> %s', source, name)
            destination.parent.mkdir(parents=True, exist_ok=True)
            os.link(source, destination)
        except OSError:
            logger.exception('Relocation failed: %s -> %s', source, name)
            raise

        try:
            os.unlink(source)
        except OSError:
            logger.exception('Failed to drop staged link: %s', source)
            # The staged file stays with its owner
            destination.unlink(missing_ok=True)
            raise
        logger.info('Relocated file: %s', name)
        return name

    def rollback_upload(self, name: str) -> None:
        """Undo ``relocate`` after the asset record could not be inserted.

        Never raises: the caller is already reporting the insert failure,
        so a file that cannot be removed is only logged as an orphan for
        an operator to clean up.

        Args:
            name: Storage path returned by ``relocate``.
        """
        try:
            logger.warning('Removing asset file without record: %s', name)
            self.delete(name)
        except OSError:
            logger.exception('Orphaned asset file left in storage: %s', name)
        else:
            logger.info('Removed asset file without record: %s', name)

    def remove_if_present(self, name: str) -> bool:
        """Delete file if it exists.

        Args:
            name: Storage path of file to delete.

        Returns:
            True if a file was removed, False if there was none.

        Raises:
            OSError: If the file exists but cannot be removed.
        """
        if not self.exists(name):
            return False
        self.delete(name)
        return True

    def open_range(self, name: str, start: int, end: int) -> Iterator[bytes]:
        """Stream bytes ``start..end`` (inclusive) of a stored file.

        Args:
            name: Storage path of the file.
            start: First byte offset.
            end: Last byte offset, inclusive.

        Yields:
            Chunks of at most 64 KB until the range is exhausted.
        """
        remaining = end - start + 1
        with self.open(name, 'rb') as stored_file:
            stored_file.seek(start)
            while remaining > 0:
                chunk = stored_file.read(min(_CHUNK_SIZE, remaining))
                if not chunk:
                    break
                remaining -= len(chunk)
                yield chunk


def get_storage() -> FileStorage:
    """Get the configured default storage backend.

    Returns:
        FileStorage instance rooted at MEDIA_ROOT.
    """
    return default_storage  # type: ignore[return-value]
