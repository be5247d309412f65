"""Filename and storage path helpers for assets."""

import re
import secrets
from pathlib import Path, PurePosixPath
from typing import Final

from django.utils import timezone

from server.apps.library.infrastructure.classifier import storage_partition

_UNSAFE_CHARS: Final = re.compile(r'[^a-zA-Z0-9.-]')
_TOKEN_BYTES: Final = 8  # 64-bit random disambiguator
_MAX_NAME_LENGTH: Final = 120
_MAX_EXTENSION_LENGTH: Final = 16
_FALLBACK_NAME: Final = 'file'


def sanitize_filename(original_name: str) -> str:
    """Reduce caller-supplied filename to a safe storage name.

    Drops any directory part, replaces every character outside
    ``[a-zA-Z0-9.-]`` with an underscore and caps the length while
    keeping the extension.

    Args:
        original_name: Filename as sent by the client.

    Returns:
        Safe filename (e.g., 'My Song!.mp3' -> 'My_Song_.mp3').
    """
    # Windows clients may send backslash separated paths
    basename = PurePosixPath(original_name.replace('\\', '/')).name
    safe_name = _UNSAFE_CHARS.sub('_', basename).lstrip('.')
    if not safe_name:
        return _FALLBACK_NAME

    if len(safe_name) > _MAX_NAME_LENGTH:
        suffix = get_file_extension(safe_name)
        if suffix:
            keep = _MAX_NAME_LENGTH - len(suffix) - 1
            return f'{safe_name[:keep]}.{suffix}'
        return safe_name[:_MAX_NAME_LENGTH]
    return safe_name


def get_file_extension(filename: str) -> str:
    """Get file extension from filename.

    Args:
        filename: Filename (e.g., 'document.pdf').

    Returns:
        Extension without dot, lowercase (e.g., 'pdf').
        Returns empty string if no extension or if it is implausibly long.
    """
    extension = Path(filename).suffix.lstrip('.').lower()
    if len(extension) > _MAX_EXTENSION_LENGTH:
        return ''
    return extension


def generate_token() -> str:
    """Random hex disambiguator for generated names."""
    return secrets.token_hex(_TOKEN_BYTES)


def _timestamp_ms() -> int:
    return int(timezone.now().timestamp() * 1000)


def generate_staging_name(original_name: str) -> str:
    """Generate a collision-free name for a staged upload.

    Args:
        original_name: Filename as sent by the client.

    Returns:
        Name like 'temp-1718000000000-9f86d081884c7d65.mp4'.
    """
    extension = get_file_extension(sanitize_filename(original_name))
    suffix = f'.{extension}' if extension else ''
    return f'temp-{_timestamp_ms()}-{generate_token()}{suffix}'


def build_stored_path(category: str, original_name: str) -> str:
    """Build durable storage path for a new asset.

    Derived from the category partition, the commit timestamp, a random
    token and the sanitized original name.

    Args:
        category: Asset category.
        original_name: Filename as sent by the client.

    Returns:
        Relative path (e.g., 'video/1718000000000_9f86d081884c7d65_clip.mp4').
    """
    name = '{timestamp}_{token}_{filename}'.format(
        timestamp=_timestamp_ms(),
        token=generate_token(),
        filename=sanitize_filename(original_name),
    )
    return f'{storage_partition(category)}/{name}'
