"""Staging area for inbound uploads.

An upload is first written to a private staging directory. Nothing in
the staging directory is ever treated as a committed asset: the commit
pipeline either promotes a staged file into durable storage or the
staged file is removed.
"""

import hashlib
import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import BinaryIO, Final, final

from django.conf import settings

from server.apps.library.exceptions import StorageFailureError, TooLargeError
from server.apps.library.infrastructure.metadata import generate_staging_name

_CHUNK_SIZE: Final = 64 * 1024
_STAGED_PATTERN: Final = 'temp-*'

logger = logging.getLogger(__name__)


def get_staging_dir() -> Path:
    """Get the staging directory, creating it on first use.

    Returns:
        Absolute path of the staging directory.
    """
    staging_dir = Path(settings.LIBRARY_STAGING_DIR)
    staging_dir.mkdir(parents=True, exist_ok=True)
    return staging_dir


def get_max_upload_bytes() -> int:
    """Upload size limit from settings."""
    return int(settings.LIBRARY_MAX_UPLOAD_BYTES)


@final
@dataclass(slots=True)
class StagedUpload:
    """Handle to an upload sitting in the staging area.

    Until ``mark_promoted`` is called, the handle owns the staged file
    and ``release`` removes it.
    """

    path: Path
    size_bytes: int
    checksum_sha256: str
    original_name: str
    promoted: bool = field(default=False)

    def mark_promoted(self) -> None:
        """Hand ownership of the file over to durable storage."""
        self.promoted = True

    def release(self) -> None:
        """Remove the staged file unless it was promoted.

        Safe to call more than once.
        """
        if self.promoted:
            return
        _discard(self.path)


def _discard(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError:
        # Left for the staging sweep
        logger.exception('Failed to remove staged file: %s', path)
    else:
        logger.debug('Removed staged file: %s', path)


def stage(stream: BinaryIO, original_name: str) -> StagedUpload:
    """Write inbound stream to the staging area.

    Reads the stream in chunks, counting bytes and computing the SHA256
    digest on the way. The partial file is removed whenever staging
    does not complete.

    Args:
        stream: Readable binary stream (file object or Django upload).
        original_name: Filename as sent by the client.

    Returns:
        Handle to the staged file.

    Raises:
        TooLargeError: If the stream exceeds LIBRARY_MAX_UPLOAD_BYTES.
        StorageFailureError: If the staged file cannot be written.
    """
    limit = get_max_upload_bytes()
    staged_path = get_staging_dir() / generate_staging_name(original_name)
    sha256_hash = hashlib.sha256()
    size_bytes = 0

    logger.info('Staging upload %r as %s', original_name, staged_path.name)

    try:
        staged_file = staged_path.open('xb')
    except OSError as exc:
        logger.exception('Failed to create staged file: %s', staged_path)
        raise StorageFailureError('Failed to stage upload') from exc

    try:
        with staged_file:
            for chunk in iter(lambda: stream.read(_CHUNK_SIZE), b''):
                size_bytes += len(chunk)
                if size_bytes > limit:
                    raise TooLargeError(limit)
                sha256_hash.update(chunk)
                staged_file.write(chunk)
    except TooLargeError:
        logger.warning(
            'Upload %r exceeds limit of %d bytes, discarding',
            original_name,
            limit,
        )
        _discard(staged_path)
        raise
    except OSError as exc:
        logger.exception('Failed to stage upload: %s', staged_path)
        _discard(staged_path)
        raise StorageFailureError('Failed to stage upload') from exc
    except Exception:
        logger.exception('Staging interrupted: %s', staged_path)
        _discard(staged_path)
        raise

    logger.info('Staged %d bytes: %s', size_bytes, staged_path.name)
    return StagedUpload(
        path=staged_path,
        size_bytes=size_bytes,
        checksum_sha256=sha256_hash.hexdigest(),
        original_name=original_name,
    )


@contextmanager
def staged_upload(
    stream: BinaryIO,
    original_name: str,
) -> Iterator[StagedUpload]:
    """Stage an upload for the duration of the ``with`` block.

    The staged file is released on every exit path; a handle promoted
    inside the block is left in place.

    Args:
        stream: Readable binary stream.
        original_name: Filename as sent by the client.

    Yields:
        Handle to the staged file.
    """
    handle = stage(stream, original_name)
    try:
        yield handle
    finally:
        handle.release()


def sweep_stale_staged_files(
    max_age: timedelta,
    *,
    dry_run: bool = False,
) -> list[Path]:
    """Remove staged files older than ``max_age``.

    Catches leftovers from crashed processes or interrupted uploads.

    Args:
        max_age: Minimum age of a staged file to be removed.
        dry_run: Only report the files that would be removed.

    Returns:
        Paths of the stale files (removed unless dry_run).
    """
    cutoff = time.time() - max_age.total_seconds()
    stale = sorted(
        path
        for path in get_staging_dir().glob(_STAGED_PATTERN)
        if path.is_file() and path.stat().st_mtime <= cutoff
    )

    if not dry_run:
        for path in stale:
            _discard(path)
        logger.info('Swept %d stale staged files', len(stale))
    return stale
