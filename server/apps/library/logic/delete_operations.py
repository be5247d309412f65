"""Business logic for deleting assets."""

import logging
from dataclasses import dataclass
from typing import final

from django.db import DatabaseError, transaction

from server.apps.library.exceptions import (
    AssetNotFoundError,
    MetadataFailureError,
    UnauthorizedError,
)
from server.apps.library.infrastructure.storage import get_storage
from server.apps.library.models import Asset

logger = logging.getLogger(__name__)


@final
@dataclass(frozen=True, slots=True)
class DeletionResult:
    """Outcome of a successful deletion.

    The metadata record is always gone. ``file_removed`` tells whether
    the backing file was removed by this call; when it was not,
    ``warning`` says why.
    """

    asset_id: int
    stored_path: str
    file_removed: bool
    warning: str | None = None

    @property
    def metadata_removed(self) -> bool:
        """Always true: a result only exists once the record is gone."""
        return True


def delete_asset(asset_id: int, *, can_mutate: bool) -> DeletionResult:
    """Delete asset from storage and database.

    The metadata store is authoritative: the backing file is removed
    first on a best-effort basis, then the record is deleted. A file
    that is missing or cannot be removed is logged and reported in the
    result but never blocks deletion of the record.

    Args:
        asset_id: ID of asset to delete.
        can_mutate: Whether the caller holds elevated rights.

    Returns:
        DeletionResult describing what was removed.

    Raises:
        UnauthorizedError: If the caller may not delete assets.
        AssetNotFoundError: If asset doesn't exist.
        MetadataFailureError: If the record cannot be deleted.
    """
    if not can_mutate:
        raise UnauthorizedError('delete assets')

    try:
        asset = Asset.objects.get(id=asset_id)
    except Asset.DoesNotExist as exc:
        logger.info('Asset not found for deletion: ID=%d', asset_id)
        raise AssetNotFoundError(asset_id) from exc

    stored_path = asset.stored_path
    logger.info('Deleting asset: ID=%d, path=%s', asset_id, stored_path)

    # Step 1: Remove physical file (best effort)
    file_removed, warning = _remove_backing_file(stored_path)

    # Step 2: Delete from database
    try:
        with transaction.atomic():
            deleted_count, _ = Asset.objects.filter(id=asset_id).delete()
    except DatabaseError as exc:
        logger.exception('Failed to delete asset record: ID=%d', asset_id)
        raise MetadataFailureError('Failed to delete asset record') from exc

    if not deleted_count:
        # Deleted concurrently between lookup and delete
        raise AssetNotFoundError(asset_id)

    logger.info('Asset record deleted from database: ID=%d', asset_id)
    return DeletionResult(
        asset_id=asset_id,
        stored_path=stored_path,
        file_removed=file_removed,
        warning=warning,
    )


def _remove_backing_file(stored_path: str) -> tuple[bool, str | None]:
    storage = get_storage()
    try:
        removed = storage.remove_if_present(stored_path)
    except OSError as exc:
        logger.warning(
            'Failed to remove backing file, deleting record anyway: %s (%s)',
            stored_path,
            exc,
        )
        return False, 'Backing file could not be removed'

    if not removed:
        logger.warning(
            'Backing file not found in storage (already deleted?): %s',
            stored_path,
        )
        return False, 'Backing file was already missing'
    return True, None
