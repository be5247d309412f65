"""Tests for delete business logic."""

import pytest

from server.apps.library.exceptions import (
    AssetNotFoundError,
    UnauthorizedError,
)
from server.apps.library.infrastructure.storage import FileStorage
from server.apps.library.logic.delete_operations import delete_asset
from server.apps.library.models import Asset


@pytest.mark.django_db
def test_delete_asset_success(commit_content, media_root):
    """Test deletion removes both the file and the record."""
    asset = commit_content(b'data')
    stored = media_root / asset.stored_path

    deletion = delete_asset(asset.id, can_mutate=True)

    assert deletion.asset_id == asset.id
    assert deletion.stored_path == asset.stored_path
    assert deletion.metadata_removed
    assert deletion.file_removed
    assert deletion.warning is None
    assert not stored.exists()
    assert not Asset.objects.filter(id=asset.id).exists()


@pytest.mark.django_db
def test_delete_asset_not_found():
    """Test deleting non-existent asset."""
    with pytest.raises(AssetNotFoundError):
        delete_asset(99999, can_mutate=True)


@pytest.mark.django_db
def test_delete_asset_file_already_removed(commit_content, media_root):
    """Test record is deleted even if the file was removed externally."""
    asset = commit_content(b'data')
    (media_root / asset.stored_path).unlink()

    deletion = delete_asset(asset.id, can_mutate=True)

    assert not deletion.file_removed
    assert deletion.warning == 'Backing file was already missing'
    assert not Asset.objects.filter(id=asset.id).exists()


@pytest.mark.django_db
def test_delete_asset_file_removal_fails(monkeypatch, commit_content):
    """Test filesystem error is reported, not raised."""
    asset = commit_content(b'data')

    def failing_remove(self, name):
        raise PermissionError('read-only file system')

    monkeypatch.setattr(FileStorage, 'remove_if_present', failing_remove)

    deletion = delete_asset(asset.id, can_mutate=True)

    assert not deletion.file_removed
    assert deletion.warning == 'Backing file could not be removed'
    assert not Asset.objects.filter(id=asset.id).exists()


@pytest.mark.django_db
def test_delete_asset_unauthorized(commit_content, media_root):
    """Test caller without elevated rights cannot delete."""
    asset = commit_content(b'data')

    with pytest.raises(UnauthorizedError):
        delete_asset(asset.id, can_mutate=False)

    assert Asset.objects.filter(id=asset.id).exists()
    assert (media_root / asset.stored_path).exists()


@pytest.mark.django_db
def test_delete_asset_twice(commit_content):
    """Test second deletion of the same asset reports not found."""
    asset = commit_content(b'data')
    delete_asset(asset.id, can_mutate=True)

    with pytest.raises(AssetNotFoundError):
        delete_asset(asset.id, can_mutate=True)
