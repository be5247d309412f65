"""Shared fixtures for library app tests."""

from collections.abc import Callable
from io import BytesIO
from pathlib import Path

import pytest
from django.contrib.auth import get_user_model

from server.apps.library.infrastructure.staging import StagedUpload, stage
from server.apps.library.logic.commit_operations import commit_asset
from server.apps.library.models import Asset

User = get_user_model()


@pytest.fixture(autouse=True)
def media_root(settings, tmp_path) -> Path:
    """Point durable storage and the staging area into tmp_path.

    Both live on the same filesystem so promotion never copies data.

    Returns:
        Path of the temporary MEDIA_ROOT.
    """
    root = tmp_path / 'media'
    root.mkdir()
    settings.MEDIA_ROOT = str(root)
    settings.LIBRARY_STAGING_DIR = str(root / '.staging')
    return root


@pytest.fixture
def staging_dir(media_root) -> Path:
    """Staging directory inside the temporary MEDIA_ROOT."""
    return media_root / '.staging'


@pytest.fixture
def durable_files(media_root) -> Callable[[], list[Path]]:
    """List committed files, ignoring the staging area.

    Returns:
        Callable returning every file under MEDIA_ROOT outside staging.
    """
    def factory() -> list[Path]:
        return sorted(
            path
            for path in media_root.rglob('*')
            if path.is_file() and '.staging' not in path.parts
        )
    return factory


@pytest.fixture
def staff_user(db):
    """Create user with elevated rights.

    Returns:
        Staff user instance.
    """
    return User.objects.create_user(
        username='librarian',
        password='testpass123',
        email='librarian@example.com',
        is_staff=True,
    )


@pytest.fixture
def user(db):
    """Create regular user without elevated rights.

    Returns:
        User instance for testing.
    """
    return User.objects.create_user(
        username='reader',
        password='testpass123',
        email='reader@example.com',
    )


@pytest.fixture
def make_staged() -> Callable[..., StagedUpload]:
    """Stage in-memory content.

    Returns:
        Callable taking content bytes and a filename.
    """
    def factory(content: bytes, name: str = 'clip.mp4') -> StagedUpload:
        return stage(BytesIO(content), name)
    return factory


@pytest.fixture
def descriptive_fields() -> dict[str, str]:
    """Valid descriptive fields for a new asset."""
    return {
        'title': 'Harbour at dawn',
        'description': 'Footage of the old harbour at sunrise',
        'theme': 'Heritage',
    }


@pytest.fixture
def commit_content(
    staff_user,
    make_staged,
    descriptive_fields,
) -> Callable[..., Asset]:
    """Stage and commit content as the staff user.

    Returns:
        Callable returning the committed Asset.
    """
    def factory(
        content: bytes,
        name: str = 'clip.mp4',
        mime_type: str = 'video/mp4',
        **fields: str,
    ) -> Asset:
        return commit_asset(
            make_staged(content, name),
            mime_type,
            {**descriptive_fields, **fields},
            staff_user,
            can_mutate=True,
        )
    return factory


@pytest.fixture
def video_content() -> bytes:
    """1000 bytes of distinguishable video payload."""
    return bytes(index % 251 for index in range(1000))
