"""Tests for Asset admin."""

import pytest
from django.contrib import admin
from django.urls import reverse

from server.apps.library.admin import AssetAdmin, _format_size
from server.apps.library.models import Asset


@pytest.mark.parametrize(('size_bytes', 'expected'), [
    (0, '0 B'),
    (1023, '1023 B'),
    (1024, '1.0 KB'),
    (1536, '1.5 KB'),
    (5 * 1024 * 1024, '5.0 MB'),
    (3 * 1024 * 1024 * 1024, '3.0 GB'),
    (2 * 1024 ** 4, '2048.0 GB'),
])
def test_format_size(size_bytes, expected):
    """Test human-readable sizes."""
    assert _format_size(size_bytes) == expected


@pytest.mark.django_db
def test_admin_changelist(admin_client, commit_content):
    """Test assets are listed in the admin."""
    asset = commit_content(b'data')

    response = admin_client.get(reverse('admin:library_asset_changelist'))

    assert response.status_code == 200
    assert b'Harbour at dawn' in response.content
    assert asset.get_filename().encode() in response.content


@pytest.mark.django_db
def test_admin_add_disabled(admin_client):
    """Test assets cannot be created from the admin."""
    response = admin_client.get(reverse('admin:library_asset_add'))

    assert response.status_code == 403


@pytest.mark.django_db
def test_admin_delete_removes_file(admin_client, commit_content, media_root):
    """Test single delete goes through the deletion pipeline."""
    asset = commit_content(b'data')
    url = reverse('admin:library_asset_delete', args=[asset.id])

    response = admin_client.post(url, {'post': 'yes'})

    assert response.status_code == 302
    assert not Asset.objects.filter(id=asset.id).exists()
    assert not (media_root / asset.stored_path).exists()


@pytest.mark.django_db
def test_admin_bulk_delete_removes_files(
    admin_client,
    commit_content,
    durable_files,
):
    """Test bulk delete action removes every backing file."""
    assets = [commit_content(b'one'), commit_content(b'two')]

    response = admin_client.post(
        reverse('admin:library_asset_changelist'),
        {
            'action': 'delete_selected',
            '_selected_action': [asset.id for asset in assets],
            'post': 'yes',
        },
    )

    assert response.status_code == 302
    assert Asset.objects.count() == 0
    assert durable_files() == []


@pytest.mark.django_db
def test_admin_stored_file_columns(commit_content):
    """Test stored name and extension columns."""
    asset = commit_content(b'data', name='Trailer.MOV', mime_type='video/mp4')
    model_admin = AssetAdmin(Asset, admin.site)

    filename = model_admin.filename_display(asset)

    assert filename == asset.stored_path.split('/')[-1]
    assert filename.endswith('_Trailer.MOV')
    assert model_admin.extension_display(asset) == 'mov'
