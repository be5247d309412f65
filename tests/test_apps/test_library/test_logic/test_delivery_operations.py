"""Tests for content delivery business logic."""

import pytest

from server.apps.library.exceptions import (
    AssetNotFoundError,
    RangeNotSatisfiableError,
)
from server.apps.library.logic.delete_operations import delete_asset
from server.apps.library.logic.delivery_operations import (
    ByteRange,
    parse_byte_range,
    read_asset,
)


@pytest.mark.parametrize(('range_header', 'expected'), [
    ('bytes=0-99', ByteRange(0, 99)),
    ('bytes=500-', ByteRange(500, 999)),
    ('bytes=900-5000', ByteRange(900, 999)),
    ('bytes=0-0', ByteRange(0, 0)),
    ('bytes=999-999', ByteRange(999, 999)),
    ('bytes=10-19, 30-39', ByteRange(10, 19)),
    ('Bytes = 5-9', ByteRange(5, 9)),
    ('bytes=0-' + '9' * 5000, ByteRange(0, 999)),
    ('bytes=' + '0' * 5000 + '1-2', ByteRange(1, 2)),
])
def test_parse_byte_range(range_header, expected):
    """Test satisfiable ranges against a 1000 byte resource."""
    assert parse_byte_range(range_header, 1000) == expected


@pytest.mark.parametrize('range_header', [
    'bytes=1000-',
    'bytes=1500-2000',
    'bytes=-500',
    'bytes=abc-',
    'bytes=5-2',
    'bytes=0-x',
    'items=0-10',
    '0-10',
    'bytes=',
    'bytes=١-٢',
    'bytes=' + '9' * 5000 + '-',
])
def test_parse_byte_range_not_satisfiable(range_header):
    """Test malformed or out-of-bounds ranges."""
    with pytest.raises(RangeNotSatisfiableError) as exc_info:
        parse_byte_range(range_header, 1000)

    assert exc_info.value.size_bytes == 1000


def test_byte_range_content_range():
    """Test Content-Range rendering and range length."""
    byte_range = ByteRange(0, 99)

    assert byte_range.length == 100
    assert byte_range.content_range(1000) == 'bytes 0-99/1000'


@pytest.mark.django_db
def test_read_asset_video_range(commit_content, video_content):
    """Test a range of a video is served as partial content."""
    asset = commit_content(video_content)

    content = read_asset(asset.id, 'bytes=0-99')

    assert content.status_code == 206
    assert content.is_partial
    assert content.content_length == 100
    headers = content.headers()
    assert headers['Content-Range'] == 'bytes 0-99/1000'
    assert headers['Content-Length'] == '100'
    assert headers['Content-Type'] == 'video/mp4'
    assert headers['Accept-Ranges'] == 'bytes'
    assert b''.join(content.iter_chunks()) == video_content[:100]


@pytest.mark.django_db
def test_read_asset_video_open_ended_range(commit_content, video_content):
    """Test open-ended range runs to the last byte."""
    asset = commit_content(video_content)

    content = read_asset(asset.id, 'bytes=900-')

    assert content.headers()['Content-Range'] == 'bytes 900-999/1000'
    assert b''.join(content.iter_chunks()) == video_content[900:]


@pytest.mark.django_db
def test_read_asset_range_at_size(commit_content, video_content):
    """Test a range starting at the size is not satisfiable."""
    asset = commit_content(video_content)

    with pytest.raises(RangeNotSatisfiableError):
        read_asset(asset.id, f'bytes={len(video_content)}-')


@pytest.mark.django_db
def test_read_asset_full(commit_content, video_content):
    """Test read without a range returns the whole body."""
    asset = commit_content(
        video_content,
        name='song.mp3',
        mime_type='audio/mpeg',
    )

    content = read_asset(asset.id)

    assert content.status_code == 200
    assert not content.is_partial
    headers = content.headers()
    assert headers['Content-Type'] == 'audio/mpeg'
    assert headers['Content-Length'] == '1000'
    assert headers['Accept-Ranges'] == 'bytes'
    assert 'Content-Range' not in headers
    assert b''.join(content.iter_chunks()) == video_content


@pytest.mark.django_db
def test_read_asset_image_ignores_range(commit_content):
    """Test images are always served whole."""
    asset = commit_content(
        b'\x89PNG' + bytes(96),
        name='photo.png',
        mime_type='image/png',
    )

    content = read_asset(asset.id, 'bytes=0-9')

    assert content.status_code == 200
    headers = content.headers()
    assert headers['Content-Type'] == 'image/jpeg'
    assert headers['Content-Length'] == '100'
    assert 'Accept-Ranges' not in headers


@pytest.mark.django_db
def test_read_asset_not_found():
    """Test reading non-existent asset."""
    with pytest.raises(AssetNotFoundError):
        read_asset(99999)


@pytest.mark.django_db
def test_read_asset_missing_file(commit_content, media_root):
    """Test record without a backing file reads as not found."""
    asset = commit_content(b'data')
    (media_root / asset.stored_path).unlink()

    with pytest.raises(AssetNotFoundError):
        read_asset(asset.id)


@pytest.mark.django_db
def test_read_asset_empty_file(commit_content):
    """Test empty asset has an empty body."""
    asset = commit_content(b'', name='empty.pdf', mime_type='application/pdf')

    content = read_asset(asset.id)

    assert content.content_length == 0
    assert list(content.iter_chunks()) == []


@pytest.mark.django_db
def test_document_lifecycle(commit_content):
    """Test commit, read and delete of a small document."""
    asset = commit_content(
        b'0123456789',
        name='notes.pdf',
        mime_type='application/pdf',
        title='T',
        description='0123456789',
        theme='X',
    )

    assert asset.size_bytes == 10
    assert asset.category == 'document'

    content = read_asset(asset.id)
    assert content.status_code == 200
    assert content.headers()['Content-Type'] == 'application/pdf'
    assert b''.join(content.iter_chunks()) == b'0123456789'

    deletion = delete_asset(asset.id, can_mutate=True)
    assert deletion.file_removed

    with pytest.raises(AssetNotFoundError):
        read_asset(asset.id)
