"""Tests for filename and storage path helpers."""

import re

from server.apps.library.infrastructure.metadata import (
    build_stored_path,
    generate_staging_name,
    get_file_extension,
    sanitize_filename,
)


def test_sanitize_filename_replaces_unsafe_characters():
    """Test characters outside [a-zA-Z0-9.-] become underscores."""
    assert sanitize_filename('My Song!.mp3') == 'My_Song_.mp3'
    assert sanitize_filename('rapport-été.pdf') == 'rapport-_t_.pdf'


def test_sanitize_filename_drops_directories():
    """Test client-supplied paths cannot escape the partition."""
    assert sanitize_filename('../../etc/passwd') == 'passwd'
    assert sanitize_filename('..\\..\\evil.pdf') == 'evil.pdf'
    assert sanitize_filename('/abs/path/clip.mp4') == 'clip.mp4'


def test_sanitize_filename_fallback():
    """Test empty or dot-only names get a placeholder."""
    assert sanitize_filename('') == 'file'
    assert sanitize_filename('...') == 'file'


def test_sanitize_filename_caps_length():
    """Test long names are truncated but keep their extension."""
    safe_name = sanitize_filename(f'{"a" * 300}.pdf')

    assert len(safe_name) == 120
    assert safe_name.endswith('.pdf')


def test_get_file_extension():
    """Test file extension extraction."""
    assert get_file_extension('test.pdf') == 'pdf'
    assert get_file_extension('test.MP4') == 'mp4'  # Lowercase
    assert get_file_extension('test') == ''  # No extension
    assert get_file_extension('test.tar.gz') == 'gz'  # Last extension


def test_build_stored_path_format():
    """Test durable path is partition, timestamp, token and name."""
    stored_path = build_stored_path('video', 'My clip.mp4')

    assert re.fullmatch(
        r'video/\d{13}_[0-9a-f]{16}_My_clip\.mp4',
        stored_path,
    )


def test_build_stored_path_is_unique():
    """Test same category and name never produce the same path."""
    paths = {build_stored_path('audio', 'song.mp3') for _ in range(100)}

    assert len(paths) == 100


def test_generate_staging_name():
    """Test staged names keep only the sanitized extension."""
    staging_name = generate_staging_name('Holiday Video.MP4')

    assert re.fullmatch(r'temp-\d{13}-[0-9a-f]{16}\.mp4', staging_name)
    assert '.' not in generate_staging_name('noext')
