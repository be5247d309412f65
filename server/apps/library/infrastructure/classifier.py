"""Content classification for inbound uploads.

Maps a declared MIME type to the asset category and the storage
partition it is committed under. The tables are built once at import
time and are read-only afterwards.
"""

from types import MappingProxyType
from typing import Final

from server.apps.library.exceptions import UnsupportedTypeError
from server.apps.library.models import Category

_MIME_CATEGORIES: Final = MappingProxyType({
    # PDF
    'application/pdf': Category.DOCUMENT,
    # Images
    'image/jpeg': Category.IMAGE,
    'image/jpg': Category.IMAGE,
    'image/png': Category.IMAGE,
    'image/gif': Category.IMAGE,
    # Audio
    'audio/mpeg': Category.AUDIO,
    'audio/mp3': Category.AUDIO,
    'audio/wav': Category.AUDIO,
    'audio/ogg': Category.AUDIO,
    # Video
    'video/mp4': Category.VIDEO,
    'video/avi': Category.VIDEO,
    'video/mov': Category.VIDEO,
    'video/wmv': Category.VIDEO,
})

_DEFAULT_CONTENT_TYPES: Final = MappingProxyType({
    Category.DOCUMENT: 'application/pdf',
    Category.IMAGE: 'image/jpeg',
    Category.AUDIO: 'audio/mpeg',
    Category.VIDEO: 'video/mp4',
})

_STORAGE_PARTITIONS: Final = MappingProxyType({
    Category.DOCUMENT: 'documents',
    Category.IMAGE: 'images',
    Category.AUDIO: 'audio',
    Category.VIDEO: 'video',
})

_STREAMABLE: Final = frozenset((Category.AUDIO, Category.VIDEO))

_FALLBACK_CONTENT_TYPE: Final = 'application/octet-stream'


def normalize_mime_type(declared_mime_type: str | None) -> str:
    """Strip parameters and case from a declared MIME type.

    Args:
        declared_mime_type: Raw value (e.g., 'Video/MP4; codecs=avc1').

    Returns:
        Bare lowercase type (e.g., 'video/mp4'), empty if missing.
    """
    if not declared_mime_type:
        return ''
    return declared_mime_type.split(';', 1)[0].strip().lower()


def supported_mime_types() -> tuple[str, ...]:
    """All MIME types accepted for upload."""
    return tuple(_MIME_CATEGORIES)


def classify(declared_mime_type: str | None) -> Category:
    """Map declared MIME type to an asset category.

    Args:
        declared_mime_type: MIME type declared for the inbound stream.

    Returns:
        Category of the asset.

    Raises:
        UnsupportedTypeError: If the type is not in the allow-list.
    """
    category = _MIME_CATEGORIES.get(normalize_mime_type(declared_mime_type))
    if category is None:
        raise UnsupportedTypeError(
            declared_mime_type or '',
            accepted=supported_mime_types(),
        )
    return category


def default_content_type(category: str) -> str:
    """Content type used when serving an asset of the given category."""
    return _DEFAULT_CONTENT_TYPES.get(category, _FALLBACK_CONTENT_TYPE)


def storage_partition(category: str) -> str:
    """Top-level storage directory for the given category."""
    return _STORAGE_PARTITIONS[category]


def is_streamable(category: str) -> bool:
    """Check if the category is served with byte-range support."""
    return category in _STREAMABLE
