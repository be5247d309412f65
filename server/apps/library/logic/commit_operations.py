"""Business logic for committing and editing assets."""

import logging
from typing import Any

from django.db import DatabaseError, transaction

from server.apps.library.exceptions import (
    AssetNotFoundError,
    MetadataFailureError,
    StorageFailureError,
    TooLargeError,
    UnauthorizedError,
)
from server.apps.library.infrastructure.classifier import classify
from server.apps.library.infrastructure.metadata import build_stored_path
from server.apps.library.infrastructure.staging import (
    StagedUpload,
    get_max_upload_bytes,
)
from server.apps.library.infrastructure.storage import get_storage
from server.apps.library.models import Asset
from server.apps.library.serializers import (
    validate_descriptive_fields,
    validate_descriptive_update,
)

# User type for Django's dynamic user model
_User = Any

logger = logging.getLogger(__name__)


def commit_asset(
    staged: StagedUpload,
    declared_mime_type: str | None,
    fields: dict[str, Any],
    owner: _User | None,
    *,
    can_mutate: bool,
) -> Asset:
    """Promote a staged upload into storage and create its record.

    Transaction safety: nothing touches durable storage until the type
    and the descriptive fields are valid. The staged file is renamed
    into storage first, then the DB record is created. If the insert
    fails for any reason, the relocated file is deleted from storage
    (rollback), so a record never points at a missing file and no file
    is left without a record.

    The staged handle is released on every failure path.

    Args:
        staged: Handle returned by the staging area.
        declared_mime_type: MIME type declared for the upload.
        fields: Descriptive fields (title, description, theme).
        owner: User instance committing the asset, or None.
        can_mutate: Whether the caller holds elevated rights.

    Returns:
        Created Asset instance.

    Raises:
        UnauthorizedError: If the caller may not commit assets.
        UnsupportedTypeError: If the MIME type is not allowed.
        InvalidMetadataError: If descriptive fields are invalid.
        TooLargeError: If the staged file exceeds the size limit.
        StorageFailureError: If the staged file cannot be relocated.
        MetadataFailureError: If the record cannot be created.
    """
    try:
        return _commit(staged, declared_mime_type, fields, owner, can_mutate)
    finally:
        staged.release()


def _commit(
    staged: StagedUpload,
    declared_mime_type: str | None,
    fields: dict[str, Any],
    owner: _User | None,
    can_mutate: bool,
) -> Asset:
    if not can_mutate:
        raise UnauthorizedError('commit assets')

    # Validation: no side effects yet
    category = classify(declared_mime_type)
    limit = get_max_upload_bytes()
    if staged.size_bytes > limit:
        raise TooLargeError(limit)
    cleaned = validate_descriptive_fields(fields)

    stored_path = build_stored_path(category, staged.original_name)
    storage = get_storage()

    # Step 1: Rename staged file into storage
    try:
        storage.relocate(staged.path, stored_path)
    except OSError as exc:
        raise StorageFailureError('Failed to relocate staged upload') from exc
    staged.mark_promoted()

    # Step 2: Create database record (in transaction)
    try:
        with transaction.atomic():
            asset = Asset.objects.create(
                title=cleaned['title'],
                description=cleaned['description'],
                theme=cleaned['theme'],
                category=category,
                file=stored_path,
                original_name=staged.original_name,
                size_bytes=staged.size_bytes,
                checksum_sha256=staged.checksum_sha256,
                owner=owner,
            )
    except Exception as exc:
        # Rollback: the relocated file must not outlive a failed insert
        logger.exception(
            'Record insert failed, rolling back commit: %s',
            stored_path,
        )
        storage.rollback_upload(stored_path)
        raise MetadataFailureError('Failed to create asset record') from exc

    logger.info(
        'Asset committed: %s (ID: %d, %d bytes)',
        stored_path,
        asset.id,
        asset.size_bytes,
    )
    return asset


def update_asset(
    asset_id: int,
    fields: dict[str, Any],
    *,
    can_mutate: bool,
) -> Asset:
    """Update descriptive fields of an asset.

    Only title, description and theme can change. Category, stored
    path, size and owner are fixed at commit time.

    Args:
        asset_id: ID of asset to update.
        fields: Descriptive fields to change.
        can_mutate: Whether the caller holds elevated rights.

    Returns:
        Updated Asset instance.

    Raises:
        UnauthorizedError: If the caller may not edit assets.
        InvalidMetadataError: If a field is invalid or immutable.
        AssetNotFoundError: If asset doesn't exist.
        MetadataFailureError: If the record cannot be saved.
    """
    if not can_mutate:
        raise UnauthorizedError('update assets')

    cleaned = validate_descriptive_update(fields)

    try:
        with transaction.atomic():
            asset = Asset.objects.select_for_update().get(id=asset_id)
            for name, field_value in cleaned.items():
                setattr(asset, name, field_value)
            asset.save(update_fields=[*cleaned, 'modified_at'])
    except Asset.DoesNotExist as exc:
        raise AssetNotFoundError(asset_id) from exc
    except DatabaseError as exc:
        logger.exception('Failed to update asset: ID=%d', asset_id)
        raise MetadataFailureError('Failed to update asset record') from exc

    logger.info(
        'Asset updated: ID=%d, fields=%s',
        asset_id,
        ', '.join(cleaned),
    )
    return asset
